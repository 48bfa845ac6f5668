"""Startup initialization and validation.

Builds the provider table and reports misconfigured providers before any
user attempts to log in with them.

Validation levels:
- STRICT: Any misconfigured provider fails startup
- WARN: Log misconfigured providers, start with the rest (default)
- SKIP: Skip validation
"""

from dataclasses import dataclass
from enum import Enum

from idp.auth.providers.registry import ProviderTable, initialize_providers
from idp.config import get_settings
from idp.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


class ValidationLevel(str, Enum):
    """Validation strictness levels."""
    STRICT = "strict"  # Fail if any check fails
    WARN = "warn"      # Log warnings, continue
    SKIP = "skip"      # Skip all validation


@dataclass
class ValidationResult:
    """Result of a validation check."""
    name: str
    passed: bool
    message: str


class StartupValidator:
    """Validates the built provider table."""

    def __init__(self, level: ValidationLevel = ValidationLevel.WARN):
        self.level = level
        self.results: list[ValidationResult] = []

    def _check(self, name: str, condition: bool, message: str) -> ValidationResult:
        result = ValidationResult(name=name, passed=condition, message=message)
        self.results.append(result)
        return result

    def validate_providers(self, table: ProviderTable) -> list[ValidationResult]:
        """Record one result per configured provider."""
        for provider in table.providers():
            self._check(provider.name, True, f"{provider.display_name} is configured")

        for failure in table.errors:
            self._check(failure.name, False, str(failure.error))

        if not table.providers() and not table.errors:
            self._check("oauth", True, "No OAuth providers configured")

        return self.results

    def report(self) -> bool:
        """Log results and return success status."""
        passed = [r for r in self.results if r.passed]
        failed = [r for r in self.results if not r.passed]

        logger.info(f"Startup validation: {len(passed)} passed, {len(failed)} failed")

        for result in passed:
            logger.debug(f"  [PASS] {result.name}: {result.message}")

        for result in failed:
            if self.level == ValidationLevel.STRICT:
                logger.error(f"  [FAIL] {result.name}: {result.message}")
            else:
                logger.warning(f"  [WARN] {result.name}: {result.message}")

        if self.level == ValidationLevel.STRICT:
            return len(failed) == 0
        return True


def startup(level: ValidationLevel | None = None, **options) -> ProviderTable:
    """Configure logging, build the provider table and validate it.

    Args:
        level: Validation level (default: STARTUP_VALIDATION_LEVEL setting)
        **options: Passed to initialize_providers()

    Returns:
        The process-wide provider table

    Raises:
        RuntimeError: If STRICT mode and a configured provider failed to build
    """
    settings = get_settings()
    setup_logging(json_output=settings.log_json, level=settings.log_level)

    if level is None:
        try:
            level = ValidationLevel(settings.startup_validation_level.lower())
        except ValueError:
            level = ValidationLevel.WARN

    table = initialize_providers(**options)

    if level == ValidationLevel.SKIP:
        logger.info("Startup validation skipped (STARTUP_VALIDATION_LEVEL=skip)")
        return table

    validator = StartupValidator(level)
    validator.validate_providers(table)
    if not validator.report():
        failed = ", ".join(r.name for r in validator.results if not r.passed)
        raise RuntimeError(f"Startup validation failed for OAuth providers: {failed}")

    return table
