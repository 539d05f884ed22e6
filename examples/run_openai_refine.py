"""Minimal example showing how to call the OpenAI-backed script writer directly."""

from __future__ import annotations

import os
from pathlib import Path

from breathe_memorizer.config import load_config
from breathe_memorizer.llm import OpenAIScriptClient
from breathe_memorizer.writing import OpenAIScriptWriter


def main() -> None:
    config = load_config(Path(__file__).with_name("example_config.yaml"))
    api_key = (
        config.openai.api_key
        or os.environ.get(config.openai.api_key_env or "OPENAI_API_KEY")
        or ""
    )
    if not api_key:
        raise RuntimeError(
            "Set the OpenAI API key before running this example "
            f"({config.openai.api_key_env})."
        )

    client = OpenAIScriptClient(config.openai, api_key=api_key)
    writer = OpenAIScriptWriter(client)

    draft = (
        "So I guess I have been working in operations for a while and I did a lot "
        "of things, like I fixed the shipping delays which were pretty bad."
    )
    refined = writer.refine("Tell me about yourself", draft)
    print("Draft:\n", draft)
    print("\nRefined:\n", refined)


if __name__ == "__main__":
    main()
