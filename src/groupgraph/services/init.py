"""InitService — create a groupgraph workspace on disk.

A workspace is a directory holding ``groupgraph.toml`` and the
``.groupgraph/`` data directory. Initialization is idempotent: an
existing config is validated and kept unless ``force`` is given, and
table creation skips tables that already exist.
"""

from __future__ import annotations

import logging
import tomllib
from typing import TYPE_CHECKING

from pydantic import ValidationError

from groupgraph.config.discovery import CONFIG_FILENAME, load_config
from groupgraph.config.models import DatabaseConfig, TraversalConfig
from groupgraph.domain.validation import Violation, check_mode
from groupgraph.infrastructure.database.engine import DATA_DIRNAME, init_database
from groupgraph.infrastructure.templates import build_template_environment
from groupgraph.services.base import BaseService
from groupgraph.services.result import ServiceResult

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

INVALID_CONFIG = "INVALID_CONFIG"
CONFIG_TEMPLATE = f"{CONFIG_FILENAME}.j2"


class InitService:
    """Workspace bootstrap. Runs before any Workspace exists."""

    @staticmethod
    def init_workspace(
        path: Path,
        *,
        owner_id: int = 1,
        inclusion_mode: str = "all",
        include_direct_profiles: bool = True,
        force: bool = False,
    ) -> ServiceResult:
        """Write ``groupgraph.toml`` under *path* and create the database."""
        op = "init_workspace"
        attempted = {"path": str(path), "inclusion_mode": inclusion_mode}
        violation = check_mode(inclusion_mode)
        if violation is not None:
            return BaseService._rejected(op, [violation], attempted=attempted)

        config_path = path / CONFIG_FILENAME
        warnings: list[str] = []
        wrote_config = False
        if config_path.is_file() and not force:
            try:
                config = load_config(config_path)
            except (tomllib.TOMLDecodeError, ValidationError) as exc:
                invalid = Violation(code=INVALID_CONFIG, field=CONFIG_FILENAME, message=str(exc))
                return BaseService._rejected(op, [invalid], attempted=attempted)
            warnings.append(f"{config_path} already exists; kept as is (use --force to rewrite)")
        else:
            path.mkdir(parents=True, exist_ok=True)
            budget = TraversalConfig()
            env = build_template_environment("workspace", workspace_root=path)
            template = env.get_template(CONFIG_TEMPLATE)
            config_path.write_text(
                template.render(
                    db_name=DatabaseConfig().filename,
                    max_nodes=budget.max_nodes,
                    max_depth=budget.max_depth,
                    owner_id=owner_id,
                    inclusion_mode=inclusion_mode.lower(),
                    include_direct_profiles=include_direct_profiles,
                ),
                encoding="utf-8",
            )
            wrote_config = True
            config = load_config(config_path)

        engine = init_database(path, db_name=config.database.filename)
        engine.dispose()
        db_path = path / DATA_DIRNAME / config.database.filename
        logger.info("Initialized workspace at %s", path)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "root": str(path),
                "config_path": str(config_path),
                "db_path": str(db_path),
                "wrote_config": wrote_config,
            },
            warnings=warnings,
        )
