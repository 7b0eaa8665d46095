from formconvert.config.settings import Settings
from formconvert.conversion.service import build_service
from formconvert.database.connection import close_pool, init_pool
from formconvert.database.repositories.conversion_repository import ConversionRepository
from formconvert.logging.logger import Log
from formconvert.worker.conversion_runner import ConversionRunner
from formconvert.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        service = build_service(settings)
        runner = ConversionRunner(service)
        worker = Worker(ConversionRepository(), runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
