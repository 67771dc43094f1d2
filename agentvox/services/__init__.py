"""Provider adapters (STT, LLM, TTS, crawling)."""
