from formconvert.conversion.exceptions import ConversionNotFoundError, ConversionStateError
from formconvert.conversion.models import ConversionStatus
from formconvert.conversion.service import ConversionService
from formconvert.logging.logger import Log


class ConversionRunner:
    """Run one conversion and absorb lost claims."""

    def __init__(self, service: ConversionService) -> None:
        self._service = service

    def run(self, conversion_id: str) -> bool:
        """Process a conversion. Returns False if another worker got to it first."""
        Log.info(f"Running conversion {conversion_id}")
        try:
            result = self._service.process_conversion(conversion_id)
        except (ConversionNotFoundError, ConversionStateError) as exc:
            Log.warning(f"Skipping conversion {conversion_id}: {exc}")
            return False

        if result.status == ConversionStatus.FAILED:
            Log.error(f"Conversion {conversion_id} failed: {result.error}")
        else:
            Log.info(
                f"Conversion {conversion_id} finished as {result.status.value} "
                f"with {len(result.warnings)} warnings"
            )
        return True
