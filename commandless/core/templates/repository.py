# commandless/core/templates/repository.py
"""SQLite repository for CommandTemplate persistence.

This module provides the reference template store used by the HTTP
interface: CRUD operations with direct sqlite3, plus the two async calls
the resolution engine consumes (``list_active_templates`` and
``increment_usage``), each bounded by a timeout.
"""

import asyncio
import json
import logging
import os
import sqlite3
from datetime import datetime
from typing import Protocol, runtime_checkable

from commandless.config import settings
from commandless.core.errors import TemplateStoreError
from commandless.core.templates.models import (
    STATUS_ACTIVE,
    STATUS_INACTIVE,
    CommandTemplate,
)
from commandless.core.templates.rendering import undocumented_placeholders

logger = logging.getLogger(__name__)


@runtime_checkable
class TemplateStore(Protocol):
    """Template registry consumed by the resolution engine."""

    async def list_active_templates(self, tenant_id: str) -> list[CommandTemplate]:
        """Return the tenant's active templates."""
        ...

    async def increment_usage(self, template_id: int) -> None:
        """Record one successful execution of a template."""
        ...


class TemplateRepository:
    """Repository for storing and retrieving command templates from SQLite.

    The repository auto-creates the database directory and table on
    initialization. Templates are never deleted, only deactivated.

    Attributes:
        db_path: Path to the SQLite database file.
        timeout: Seconds allowed for each async store call.

    Example:
        >>> repo = TemplateRepository(db_path="data/templates.db")
        >>> tpl = repo.create(CommandTemplate(
        ...     id=0, tenant_id="guild-1", name="ban",
        ...     natural_language_pattern="ban {user} for {reason}",
        ...     output_template="/ban {user} {reason}",
        ... ))
        >>> print(f"Created template with ID: {tpl.id}")
    """

    def __init__(self, db_path: str = "data/templates.db", timeout: float | None = None) -> None:
        """Initialize the TemplateRepository.

        Creates the database directory and templates table if they don't exist.
        Enables WAL mode for better concurrent access.

        Args:
            db_path: Path to the SQLite database file.
            timeout: Async call timeout; defaults to settings.store_timeout_seconds.
        """
        self.db_path = db_path
        self.timeout = settings.store_timeout_seconds if timeout is None else timeout

        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._init_db()

    def _init_db(self) -> None:
        """Create the templates table if it doesn't exist and enable WAL mode."""
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS templates (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    tenant_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    natural_language_pattern TEXT NOT NULL,
                    output_template TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'active',
                    usage_count INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    aliases TEXT NOT NULL DEFAULT '[]'
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_templates_tenant "
                "ON templates (tenant_id, status)"
            )
            conn.commit()
        finally:
            conn.close()

    _COLUMNS = (
        "id, tenant_id, name, natural_language_pattern, output_template, "
        "status, usage_count, created_at, description, aliases"
    )

    def _row_to_template(self, row: tuple) -> CommandTemplate:
        """Convert a database row to a CommandTemplate object."""
        return CommandTemplate(
            id=row[0],
            tenant_id=row[1],
            name=row[2],
            natural_language_pattern=row[3],
            output_template=row[4],
            status=row[5],
            usage_count=row[6],
            created_at=datetime.fromisoformat(row[7]),
            description=row[8],
            aliases=json.loads(row[9]),
        )

    def create(self, template: CommandTemplate) -> CommandTemplate:
        """Create a new template in the database.

        Args:
            template: Template to create. The id field is ignored and
                assigned by the database.

        Returns:
            CommandTemplate with the database-assigned ID.

        Raises:
            ValueError: If the output template references a placeholder that
                is neither in the pattern nor has a documented default.
        """
        unresolvable = undocumented_placeholders(
            template.natural_language_pattern, template.output_template
        )
        if unresolvable:
            raise ValueError(
                f"Output placeholders without pattern slot or default: {', '.join(unresolvable)}"
            )

        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute(
                """
                INSERT INTO templates (
                    tenant_id, name, natural_language_pattern, output_template,
                    status, usage_count, created_at, description, aliases
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    template.tenant_id,
                    template.name,
                    template.natural_language_pattern,
                    template.output_template,
                    template.status,
                    template.usage_count,
                    template.created_at.isoformat(),
                    template.description,
                    json.dumps(template.aliases),
                ),
            )
            conn.commit()
            template_id = cursor.lastrowid
        finally:
            conn.close()

        logger.info("Created template '%s' for tenant %s", template.name, template.tenant_id)
        return CommandTemplate(
            id=template_id,
            tenant_id=template.tenant_id,
            name=template.name,
            natural_language_pattern=template.natural_language_pattern,
            output_template=template.output_template,
            status=template.status,
            usage_count=template.usage_count,
            created_at=template.created_at,
            description=template.description,
            aliases=list(template.aliases),
        )

    def get(self, template_id: int) -> CommandTemplate | None:
        """Retrieve a template by its ID.

        Returns:
            CommandTemplate if found, None otherwise.
        """
        conn = sqlite3.connect(self.db_path)
        try:
            row = conn.execute(
                f"SELECT {self._COLUMNS} FROM templates WHERE id = ?",
                (template_id,),
            ).fetchone()
            return self._row_to_template(row) if row else None
        finally:
            conn.close()

    def list_all(self, tenant_id: str) -> list[CommandTemplate]:
        """List all templates of a tenant, active and inactive, by ID."""
        conn = sqlite3.connect(self.db_path)
        try:
            rows = conn.execute(
                f"SELECT {self._COLUMNS} FROM templates WHERE tenant_id = ? ORDER BY id",
                (tenant_id,),
            ).fetchall()
            return [self._row_to_template(row) for row in rows]
        finally:
            conn.close()

    def list_active(self, tenant_id: str) -> list[CommandTemplate]:
        """List the tenant's active templates by ID."""
        conn = sqlite3.connect(self.db_path)
        try:
            rows = conn.execute(
                f"SELECT {self._COLUMNS} FROM templates "
                "WHERE tenant_id = ? AND status = ? ORDER BY id",
                (tenant_id, STATUS_ACTIVE),
            ).fetchall()
            return [self._row_to_template(row) for row in rows]
        finally:
            conn.close()

    def deactivate(self, template_id: int) -> bool:
        """Deactivate a template.

        Returns:
            True if the template existed, False otherwise.
        """
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute(
                "UPDATE templates SET status = ? WHERE id = ?",
                (STATUS_INACTIVE, template_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def record_usage(self, template_id: int) -> bool:
        """Increment a template's usage count.

        Returns:
            True if the template existed, False otherwise.
        """
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute(
                "UPDATE templates SET usage_count = usage_count + 1 WHERE id = ?",
                (template_id,),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    async def list_active_templates(self, tenant_id: str) -> list[CommandTemplate]:
        """Async, timeout-bounded variant of list_active.

        Raises:
            TemplateStoreError: If the query fails or exceeds the timeout.
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.list_active, tenant_id), timeout=self.timeout
            )
        except (TimeoutError, asyncio.TimeoutError) as e:
            raise TemplateStoreError(
                f"Listing templates for tenant {tenant_id} timed out"
            ) from e
        except sqlite3.Error as e:
            raise TemplateStoreError(f"Failed to list templates: {e}") from e

    async def increment_usage(self, template_id: int) -> None:
        """Async, timeout-bounded variant of record_usage.

        Raises:
            TemplateStoreError: If the update fails or exceeds the timeout.
        """
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.record_usage, template_id), timeout=self.timeout
            )
        except (TimeoutError, asyncio.TimeoutError) as e:
            raise TemplateStoreError(
                f"Incrementing usage for template {template_id} timed out"
            ) from e
        except sqlite3.Error as e:
            raise TemplateStoreError(f"Failed to increment usage: {e}") from e


_repository: TemplateRepository | None = None


def get_repository(db_path: str | None = None) -> TemplateRepository:
    """Get the singleton TemplateRepository instance.

    Args:
        db_path: Path to SQLite database (only used on first call).

    Returns:
        TemplateRepository singleton instance.
    """
    global _repository
    if _repository is None:
        _repository = TemplateRepository(db_path=db_path or settings.templates_db_path)
    return _repository


def reset_repository() -> None:
    """Drop the singleton so the next call opens a fresh database (for testing)."""
    global _repository
    _repository = None
