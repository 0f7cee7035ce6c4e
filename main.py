"""Chat Router: LLM con historial acotado por conversación."""

from adapters.inbound.cli import main


if __name__ == "__main__":
    main()
