"""
Interactive CLI adapter over the provider gateway.

Architectural role:
- Terminal interface for the same operations the HTTP adapter exposes.
- Delegates all provider work to `app.core.gateway.ProviderGateway`.

Request lifecycle (per user turn):
1. Read one line from stdin.
2. Handle local control commands (`exit`/`quit`, `empty chat`/`clear chat`,
   `/features`, `/history`, `/stream`, `/rag`).
3. Send any other text as a memory-backed turn in the default conversation.
4. Print the reply (streamed fragments are printed as they arrive).

Error handling strategy:
- `GatewayError` and provider failures are classified and printed as
  `[CODE] message`; the loop continues.
- EOF and keyboard interrupts end the session without traceback output.

Side effects:
- Writes to stdout; conversation memory lives only for the process lifetime.
"""

from dotenv import load_dotenv

load_dotenv()

import sys

from app.core.errors import GatewayError, classify_exception
from app.core.gateway import ProviderGateway, build_gateway
from app.llm.errors import ProviderError, UpstreamHTTPError
from app.memory.chat_memory import DEFAULT_CONVERSATION_ID


# =========================================================
# UTF-8 SAFE OUTPUT
# =========================================================

if hasattr(sys.stdout, "reconfigure"):
    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    except (ValueError, OSError):
        pass


HELP_TEXT = """Commands:
 /features          enabled capabilities
 /history           messages kept for this conversation
 /stream <message>  stream a reply fragment by fragment
 /rag <question>    answer from the vector store
 clear chat         forget this conversation
 exit | quit        leave"""


# =========================================================
# COMMAND HANDLERS
# =========================================================

def print_features(gateway: ProviderGateway) -> None:
    for name, available in gateway.features().items():
        print(f" {name}: {'on' if available else 'off'}")


def print_history(gateway: ProviderGateway) -> None:
    messages = gateway.memory_messages(DEFAULT_CONVERSATION_ID)
    if not messages:
        print("No messages yet.")
        return

    for entry in messages:
        print(f"[{entry['role']}] {entry['content']}")


def print_stream(gateway: ProviderGateway, message: str) -> None:
    for fragment in gateway.stream_chat(message):
        print(fragment, end="", flush=True)
    print()


def print_rag_answer(gateway: ProviderGateway, question: str) -> None:
    answer = gateway.ask(question)
    print(answer.answer)

    if answer.sources:
        print("\nSources:")
        for source in answer.sources:
            score = f"{source.score:.3f}" if source.score is not None else "-"
            print(f" - {source.id} ({score})")


def handle_input(gateway: ProviderGateway, text: str) -> bool:
    """
    Execute one user input. Returns False when the session should end.

    Raises:
    - `GatewayError`, `ProviderError`, `UpstreamHTTPError` from gateway calls.
    """
    command = text.lower()

    if command in ("exit", "quit"):
        print("Shutting down.")
        return False

    if command in ("empty chat", "clear chat"):
        gateway.clear_memory(DEFAULT_CONVERSATION_ID)
        print("Chat cleared.")
        return True

    if command in ("/help", "help"):
        print(HELP_TEXT)
    elif command == "/features":
        print_features(gateway)
    elif command == "/history":
        print_history(gateway)
    elif command.startswith("/stream"):
        print("\nResponse:\n")
        print_stream(gateway, text[len("/stream"):].strip())
    elif command.startswith("/rag"):
        print("\nResponse:\n")
        print_rag_answer(gateway, text[len("/rag"):].strip())
    else:
        _, _, response = gateway.chat_with_memory(DEFAULT_CONVERSATION_ID, text)
        print("\nResponse:\n")
        print(response)

    print("\n" + "-" * 60 + "\n")
    return True


# =========================================================
# MAIN
# =========================================================

def main(gateway: ProviderGateway | None = None):
    """Run the interactive terminal session."""
    if gateway is None:
        gateway = build_gateway()

    print("AI Model Gateway CLI started. (Type 'exit' to quit, '/help' for commands)")
    print("-" * 60)
    print_features(gateway)
    print("-" * 60)

    while True:

        try:
            question = input("Question: ").strip()

        except EOFError:
            print("\nSession ended.")
            break

        except KeyboardInterrupt:
            print("\nOperation cancelled by user.")
            break

        if not question:
            continue

        try:
            if not handle_input(gateway, question):
                break
        except (GatewayError, ProviderError, UpstreamHTTPError) as exc:
            error = classify_exception(exc)
            print(f"[{error.kind.code}] {error.message}\n")


if __name__ == "__main__":
    main()
