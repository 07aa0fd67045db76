import logging

from wincontrol.core.config import ConfigManager
from wincontrol.core.errors import WindowControlError
from wincontrol.daemon.service import WindowControlService


def main() -> None:
    config_manager = ConfigManager()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    try:
        service = WindowControlService(config_manager)
    except WindowControlError as e:
        logging.error(f"Cannot start: {e}")
        raise SystemExit(1)

    logging.getLogger().setLevel(service.config.log_level)
    try:
        service.run()
    except KeyboardInterrupt:
        logging.info("Interrupted by user.")
    except WindowControlError as e:
        logging.error(f"Cannot start: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
