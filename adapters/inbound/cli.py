# CLI Adapter - Entry point por línea de comandos

import sys
import json
import asyncio
import logging
import argparse
from config.settings import settings
from adapters.factory import DependencyContainer, create_chat_service

logger = logging.getLogger(__name__)

EPHEMERAL_NOTICE = (
    "STORAGE_BACKEND=memory: cada ejecución del CLI parte de un historial vacío; "
    "usa STORAGE_BACKEND=redis para que --history y --clear vean conversaciones previas"
)


def setup_logging():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def serve():
    import uvicorn

    uvicorn.run(
        "adapters.inbound.api:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


async def run_command(args) -> dict:
    container = DependencyContainer()
    if container.storage_backend == "memory" and (args.history or args.clear):
        logger.warning(EPHEMERAL_NOTICE)
    service = create_chat_service(container)
    try:
        if args.clear:
            return await service.clear_history(args.conversation)
        if args.history:
            return await service.get_history(args.conversation, args.limit)
        return await service.chat(
            args.message,
            conversation_id=args.conversation,
            user_id=args.user,
            system_prompt=args.system,
        )
    finally:
        await container.close()


def main():
    parser = argparse.ArgumentParser(
        description="Chat Router - LLM con historial", epilog=EPHEMERAL_NOTICE
    )
    parser.add_argument("--serve", action="store_true", help="Levanta la API HTTP")
    parser.add_argument("--message", "-m", help="Mensaje a enviar")
    parser.add_argument("--conversation", "-c", default=None, help="ID de conversación")
    parser.add_argument("--user", "-u", default=None, help="ID de usuario")
    parser.add_argument("--system", default=None, help="Prompt de sistema")
    parser.add_argument("--history", action="store_true", help="Muestra el historial")
    parser.add_argument("--limit", type=int, default=None, help="Mensajes del historial")
    parser.add_argument("--clear", action="store_true", help="Borra el historial")
    args = parser.parse_args()

    # Modo servidor
    if args.serve:
        serve()
        return

    setup_logging()

    # Modo chat
    if not (args.history or args.clear):
        args.message = args.message or input("Mensaje: ").strip()
        if not args.message:
            print("Error: Mensaje requerido")
            return

    try:
        result = asyncio.run(run_command(args))
    except Exception as e:
        logging.error(f"Error: {e}")
        sys.exit(1)

    if args.history or args.clear:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        print(result["response"])


if __name__ == "__main__":
    main()
