"""Configuration settings for the AI HTTP tester."""
import os

# Model endpoint configuration (any OpenAI chat-completions compatible server)
MODEL_ENDPOINT = os.getenv("AIHT_MODEL_ENDPOINT", "http://localhost:11434/v1/chat/completions")
MODEL_API_KEY = os.getenv("AIHT_API_KEY", "")
SMART_MODEL = os.getenv("AIHT_SMART_MODEL", "deepseek-r1:7b")
FAST_MODEL = os.getenv("AIHT_FAST_MODEL", "deepseek-r1:1.5b")
DISCOVERY_TEMPERATURE = float(os.getenv("AIHT_DISCOVERY_TEMPERATURE", "0.7"))
ANALYSIS_TEMPERATURE = float(os.getenv("AIHT_ANALYSIS_TEMPERATURE", "0.2"))
MAX_TOKENS = int(os.getenv("AIHT_MAX_TOKENS", "4096"))
MODEL_TIMEOUT = float(os.getenv("AIHT_MODEL_TIMEOUT", "120"))

# Agents SDK trace export only makes sense against api.openai.com
TRACING_ENABLED = bool(os.getenv("AIHT_TRACING"))

# Proxy configuration
PROXY_TIMEOUT = float(os.getenv("AIHT_PROXY_TIMEOUT", "30"))
PROXY_MAX_REDIRECTS = 5

# Backend server
SERVER_HOST = os.getenv("AIHT_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("AIHT_PORT", "3000"))
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

# Local Ollama diagnostics
OLLAMA_BASE = os.getenv("AIHT_OLLAMA_BASE", "http://localhost:11434")
