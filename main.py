"""
Command line entry point with logging configuration.
"""
import json
import logging
import logging.config
import sys
from typing import Optional

from config.settings import Settings
from orchestration.orchestrator import ResponseOrchestrator
from retrieval.notes import InMemoryNoteStore, load_notes_file
from exceptions import EngineError


# Configure logging
LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'detailed': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'detailed',
            'stream': 'ext://sys.stderr'
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': 'engine.log',
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5,
            'level': 'DEBUG',
            'formatter': 'detailed'
        }
    },
    'root': {
        'level': 'DEBUG',
        'handlers': ['console', 'file']
    }
}


def setup_logging(config: Settings) -> None:
    """Configure logging based on settings."""
    logging_config = json.loads(json.dumps(LOGGING_CONFIG))
    if config.log_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        logging_config['handlers']['file']['filename'] = str(config.log_file)
    else:
        del logging_config['handlers']['file']
        logging_config['root']['handlers'] = ['console']

    logging_config['root']['level'] = config.log_level
    logging.config.dictConfig(logging_config)


logger = logging.getLogger(__name__)


USAGE = """Usage:
  python main.py chat <message>
  python main.py notes <notes.json> <client_id> [note_id ...]
  python main.py summary <notes.json> <client_id> [days]"""


def build_orchestrator(config: Settings, notes_path: Optional[str] = None) -> ResponseOrchestrator:
    store = load_notes_file(notes_path) if notes_path else InMemoryNoteStore()
    return ResponseOrchestrator(config, note_store=store)


def run(argv: list, config: Optional[Settings] = None) -> int:
    if len(argv) < 2 or argv[0] not in ("chat", "notes", "summary"):
        print(USAGE)
        return 1

    if config is None:
        config = Settings()
    setup_logging(config)

    command, args = argv[0], argv[1:]
    logger.info(f"Running '{command}' (upstream configured: {config.upstream_configured()})")

    if command == "chat":
        message = " ".join(args).strip()
        if not message:
            print("Error: Message cannot be empty")
            return 1
        result = build_orchestrator(config).get_chat_reply(message).to_dict()
    elif command == "notes":
        if len(args) < 2:
            print(USAGE)
            return 1
        orchestrator = build_orchestrator(config, args[0])
        result = orchestrator.get_notes_analysis(args[1], note_ids=args[2:] or None).to_dict()
    else:
        if len(args) < 2:
            print(USAGE)
            return 1
        days = int(args[2]) if len(args) > 2 else None
        orchestrator = build_orchestrator(config, args[0])
        print(orchestrator.get_progress_summary(args[1], days=days))
        return 0

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(run(sys.argv[1:]))
    except EngineError as e:
        logger.error(f"Engine failed: {e}")
        print(f"\nError: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        print("\nInterrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"\nFatal error: {e}")
        sys.exit(1)
