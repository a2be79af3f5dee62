"""
chatbridge - Streaming Example

Streams a completion to stdout.

Usage:
    AI_API_KEY=... AI_BASE_URL=https://api.openai.com/v1 python -m chatbridge.examples.stream
    AI_MODEL=claude-3-5-haiku-latest AI_DIALECT=anthropic python -m chatbridge.examples.stream
"""

import os
import sys

from chatbridge import ChatBridgeError, ChatRequest, Client, Message
from chatbridge.core.model_names import OPENAI_GPT_4O


def main() -> int:
    try:
        client = Client()
    except ChatBridgeError as e:
        print(e, file=sys.stderr)
        return 1

    request = ChatRequest(
        model=os.getenv("AI_MODEL") or OPENAI_GPT_4O,
        messages=[Message.user("What is AGI!")]
    )

    with client:
        try:
            if os.getenv("AI_DIALECT", "openai").lower() == "anthropic":
                stream = client.anthropic_chat_completion_stream(request)
            else:
                stream = client.chat_completion_stream(request)

            with stream:
                for chunk in stream:
                    if chunk.choices:
                        print(chunk.choices[0].delta.content.text(), end="", flush=True)
        except ChatBridgeError as e:
            print(f"\n{e}", file=sys.stderr)
            return 1

    print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
