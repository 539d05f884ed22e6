from .openai_client import OpenAIScriptClient, PromptMetadata

__all__ = ["OpenAIScriptClient", "PromptMetadata"]
