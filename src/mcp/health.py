"""Health checking for MCP server dependencies.

Provides centralized status checking for all server dependencies:
- EDMS properties library (binding checks, class listing)
- Action codes library
- Local form store
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from src.config import get_store_dir
from src.library import ActionCodeLibrary, LibraryError, PropertiesLibrary

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Overall health status."""

    HEALTHY = "healthy"  # All dependencies available
    DEGRADED = "degraded"  # Some features unavailable
    UNHEALTHY = "unhealthy"  # Critical dependencies missing


@dataclass
class ServiceStatus:
    """Status of a single service/dependency."""

    available: bool
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"available": self.available, "message": self.message, **self.details}


@dataclass
class ServerHealth:
    """Complete server health report."""

    status: HealthStatus
    version: str
    checked_at: datetime

    # Service statuses
    properties_library: ServiceStatus
    action_codes: ServiceStatus
    form_store: ServiceStatus

    # Capability summary
    can_check_bindings: bool  # Properties library readable
    can_save: bool  # Store directory writable

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "status": self.status.value,
            "version": self.version,
            "checked_at": self.checked_at.isoformat(),
            "services": {
                "properties_library": self.properties_library.to_dict(),
                "action_codes": self.action_codes.to_dict(),
                "form_store": self.form_store.to_dict(),
            },
            "capabilities": {
                "import_html": True,
                "export_html": True,
                "binding_checks": self.can_check_bindings,
                "list_classes": self.can_check_bindings,
                "save_forms": self.can_save,
            },
        }


def check_properties_library() -> ServiceStatus:
    """Check if the EDMS properties library is installed and readable."""
    library = PropertiesLibrary()
    details = {"path": str(library.path)}
    if not library.path.exists():
        return ServiceStatus(
            available=False,
            message="Properties library not found. Set PROPERTIES_LIBRARY_PATH",
            details=details,
        )
    try:
        classes = library.classes()
    except LibraryError as e:
        return ServiceStatus(available=False, message=str(e), details=details)
    return ServiceStatus(
        available=True,
        message=f"Properties library loaded with {len(classes)} classes",
        details={**details, "class_count": len(classes)},
    )


def check_action_codes() -> ServiceStatus:
    """Check the action codes library.

    Always available: missing or broken files fall back to the defaults.
    """
    library = ActionCodeLibrary()
    codes = library.codes()
    source = str(library.path) if library.path.exists() else "defaults"
    return ServiceStatus(
        available=True,
        message=f"{len(codes)} action codes from {source}",
        details={"source": source, "code_count": len(codes)},
    )


def check_form_store() -> ServiceStatus:
    """Check if the form store directory exists or can be created."""
    store_dir = get_store_dir()
    try:
        store_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return ServiceStatus(
            available=False,
            message=f"Form store not writable: {e}",
            details={"path": str(store_dir)},
        )
    saved = len(list(store_dir.glob("*.json")))
    return ServiceStatus(
        available=True,
        message=f"Form store: {saved} saved forms",
        details={"path": str(store_dir), "form_count": saved},
    )


def get_server_health() -> ServerHealth:
    """Get comprehensive server health status.

    Checks all dependencies and returns overall health assessment.
    Import and export need nothing beyond the package itself, so the server
    is never unhealthy; it is degraded when a library or the store is
    unavailable.

    Returns:
        ServerHealth with status of all services.
    """
    from .lib import get_server_version

    properties_library = check_properties_library()
    action_codes = check_action_codes()
    form_store = check_form_store()

    can_check_bindings = properties_library.available
    can_save = form_store.available

    if can_check_bindings and can_save:
        status = HealthStatus.HEALTHY
    else:
        status = HealthStatus.DEGRADED

    return ServerHealth(
        status=status,
        version=get_server_version(),
        checked_at=datetime.now(UTC),
        properties_library=properties_library,
        action_codes=action_codes,
        form_store=form_store,
        can_check_bindings=can_check_bindings,
        can_save=can_save,
    )


def format_startup_banner(health: ServerHealth) -> str:
    """Format a startup status banner for logging.

    Args:
        health: Server health status.

    Returns:
        Formatted multi-line banner string.
    """
    status_icon = {
        HealthStatus.HEALTHY: "[OK]",
        HealthStatus.DEGRADED: "[!!]",
        HealthStatus.UNHEALTHY: "[XX]",
    }

    def svc_icon(available: bool) -> str:
        return "[OK]" if available else "[--]"

    lines = [
        "",
        "=" * 60,
        f"  formbridge MCP Server v{health.version}",
        "=" * 60,
        f"  Status: {status_icon[health.status]} {health.status.value.upper()}",
        "",
        "  Services:",
        f"    {svc_icon(health.properties_library.available)} Properties: "
        f"{health.properties_library.message}",
        f"    {svc_icon(health.action_codes.available)} Actions:    "
        f"{health.action_codes.message}",
        f"    {svc_icon(health.form_store.available)} Store:      {health.form_store.message}",
    ]

    if health.status != HealthStatus.HEALTHY:
        lines.append("")
        lines.append("  Action Required:")
        if not health.can_check_bindings:
            lines.append("    - Set PROPERTIES_LIBRARY_PATH to a readable properties XML file")
        if not health.can_save:
            lines.append("    - Set FORMBRIDGE_STORE_DIR to a writable directory")

    lines.extend(["", "=" * 60, ""])
    return "\n".join(lines)


def log_startup_status() -> None:
    """Log server health status on startup.

    Outputs a formatted banner showing service status and capabilities.
    """
    health = get_server_health()

    for line in format_startup_banner(health).split("\n"):
        if line.strip():
            logger.info(line)

    if health.status == HealthStatus.DEGRADED:
        logger.warning(
            "Server is DEGRADED - import and export work, "
            "binding checks or saving are unavailable."
        )
    else:
        logger.info("Server is ready - all features available.")


__all__ = [
    "HealthStatus",
    "ServiceStatus",
    "ServerHealth",
    "check_properties_library",
    "check_action_codes",
    "check_form_store",
    "get_server_health",
    "format_startup_banner",
    "log_startup_status",
]
