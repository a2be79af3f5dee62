"""
chatbridge - Model Names

Well-known model identifiers, grouped by vendor. Any string is accepted
as a model name; these exist for convenience and typo safety.
"""

# OpenAI
OPENAI_GPT_4O = "gpt-4o"
OPENAI_GPT_4O_MINI = "gpt-4o-mini"
OPENAI_GPT_41 = "gpt-4.1"
OPENAI_GPT_41_MINI = "gpt-4.1-mini"
OPENAI_GPT_41_NANO = "gpt-4.1-nano"
OPENAI_O1 = "o1"
OPENAI_O1_MINI = "o1-mini"
OPENAI_O3 = "o3"
OPENAI_O3_MINI = "o3-mini"
OPENAI_O4_MINI = "o4-mini"

# DeepSeek
DEEPSEEK_CHAT = "deepseek-chat"
DEEPSEEK_REASONER = "deepseek-reasoner"

# Google Gemini (OpenAI-compatible endpoint)
GEMINI_20_FLASH = "gemini-2.0-flash"
GEMINI_20_FLASH_EXP = "gemini-2.0-flash-exp"
GEMINI_25_PRO = "gemini-2.5-pro"
GEMINI_25_FLASH = "gemini-2.5-flash"

# Anthropic Claude
ANTHROPIC_CLAUDE_4_OPUS = "claude-opus-4"
ANTHROPIC_CLAUDE_4_SONNET = "claude-sonnet-4"
ANTHROPIC_CLAUDE_37_SONNET = "claude-3-7-sonnet"
ANTHROPIC_CLAUDE_35_HAIKU = "claude-3-5-haiku"

# MiniMax
MINIMAX_M25 = "MiniMax-M2.5"
MINIMAX_M25_HIGHSPEED = "MiniMax-M2.5-highspeed"
MINIMAX_M21 = "MiniMax-M2.1"
MINIMAX_M21_HIGHSPEED = "MiniMax-M2.1-highspeed"
MINIMAX_M2 = "MiniMax-M2"

# Moonshot Kimi
KIMI_K2 = "kimi-k2"
KIMI_K25 = "kimi-k2.5"
MOONSHOT_8K = "moonshot-v1-8k"
MOONSHOT_32K = "moonshot-v1-32k"
MOONSHOT_128K = "moonshot-v1-128k"

# Zhipu GLM
GLM_4_PLUS = "glm-4-plus"
GLM_4_AIR = "glm-4-air"
GLM_4_AIRX = "glm-4-airx"
GLM_4_LONG = "glm-4-long"
GLM_4_FLASH = "glm-4-flash"

# ByteDance Doubao
DOUBAO_PRO_32K = "doubao-pro-32k"
DOUBAO_PRO_256K = "doubao-1.5-pro-256k"
DOUBAO_LITE_32K = "doubao-lite-32k"
DOUBAO_LITE_128K = "doubao-lite-128k"

# Alibaba Qwen
QWEN_MAX = "qwen-max"
QWEN_PLUS = "qwen-plus"
QWEN_TURBO = "qwen-turbo"
QWEN3_MAX = "qwen3-max"
QWEN35_PLUS = "qwen3.5-plus"
QWEN35_FLASH = "qwen3.5-flash"
