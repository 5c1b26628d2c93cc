"""Migration orchestrator - coordinates the complete migration process."""

import json
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .exceptions import (
    ExportError,
    OperationCancelled,
    PreconditionError,
    RecordError,
)
from .models.migration import MigrationConfig, MigrationReport
from .models.record import ApiRecord, RecordResult, RecordStatus
from .exporters.apictl import ApictlClient, check_required_tools
from .extractors.base import BaseExtractor, ExtractionResult
from .extractors.archive_extractor import WSO2ArchiveExtractor
from .loaders.base import BaseLoader
from .loaders.tyk_loader import TykLoader
from .services.duplicate_checker import DuplicateChecker
from .services.validator import RecordValidator

logger = logging.getLogger(__name__)


class MigrationOrchestrator:
    """
    Orchestrates the complete migration process.

    Handles:
    - Tool and version checks
    - apictl environment registration and login
    - Destination connectivity check
    - Export, extraction, duplicate checks and imports
    - Progress tracking and reporting

    Steps run strictly in sequence. Fatal problems raise a
    MigrationError subclass; record problems are counted and the loop
    moves on to the next archive.
    """

    def __init__(
        self,
        config: MigrationConfig,
        apictl: Optional[ApictlClient] = None,
        loader: Optional[BaseLoader] = None,
        extractor: Optional[BaseExtractor] = None,
        prompt: Callable[[str], str] = input,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Migration configuration
            apictl: apictl wrapper (created from config if omitted)
            loader: Destination loader (a TykLoader if omitted)
            extractor: Archive extractor (reads the export dir if omitted)
            prompt: Function used to ask the operator for confirmation
            which: Function used to locate required executables
        """
        self.config = config
        self.apictl = apictl or ApictlClient(
            binary=config.apictl_binary,
            insecure=not config.verify_ssl,
        )
        self.loader = loader or TykLoader(
            base_url=config.tyk_host,
            api_key=config.tyk_token,
            dry_run=config.dry_run,
            verify_ssl=config.verify_ssl,
            timeout=config.timeout,
        )
        self.export_dir = (
            Path(config.export_dir).expanduser()
            if config.export_dir
            else ApictlClient.export_dir(config.env_name)
        )
        self.extractor = extractor or WSO2ArchiveExtractor(self.export_dir)
        self.duplicate_checker = DuplicateChecker(self.loader, config.match_policy)
        self.validator = RecordValidator()
        self._prompt = prompt
        self._which = which

        # Runtime state
        self.report: Optional[MigrationReport] = None

    def run_migration(self) -> MigrationReport:
        """
        Run the complete migration.

        Returns:
            MigrationReport with counters and per-record results
        """
        self.check_prerequisites()
        self.prepare_source()
        self.validate_destination()

        self.report = MigrationReport(dry_run=self.config.dry_run)
        self.report.started_at = datetime.utcnow()

        try:
            self.export_apis()
            self.migrate_archives()
        finally:
            self.report.completed_at = datetime.utcnow()
            if self.config.report_dir:
                self._save_report()

        logger.info(self.report.summary())
        return self.report

    def check_prerequisites(self):
        """Fail when apictl is missing or too old."""
        check_required_tools([self.config.apictl_binary], which=self._which)
        self.apictl.check_version(self.config.minimum_apictl_version)

    def prepare_source(self):
        """Register (or reuse) the apictl environment, log in and clear old exports."""
        name = self.config.env_name
        host = self.config.wso2_host
        envs = self.apictl.get_envs()

        if name not in envs:
            logger.info(f"Creating WSO2 environment {name}")
            self.apictl.add_env(name, host)
        elif envs[name] != host:
            logger.warning(f"WSO2 migration environment already exists with host: {envs[name]}")
            logger.warning(f"New host to be configured: {host}")

            if not self._confirm("Do you want to recreate the environment with the new host? (y/n): "):
                raise OperationCancelled("Operation cancelled by user")

            logger.info("Removing existing environment...")
            self.apictl.remove_env(name)
            logger.info(f"Creating WSO2 environment {name} with new host")
            self.apictl.add_env(name, host)
        else:
            logger.info(f"Using existing WSO2 environment {name}")

        self.apictl.login(name, self.config.wso2_username, self.config.wso2_password)
        ApictlClient.clear_export_dir(self.export_dir)

    def validate_destination(self):
        """Fail when the Tyk Dashboard is unreachable or rejects the token."""
        if not self.loader.validate_connection():
            raise PreconditionError("Could not connect to Tyk Dashboard")
        logger.info("Connected to Tyk dashboard successfully")

    def export_apis(self):
        """Run the apictl export and make sure it produced archives."""
        self.apictl.export_apis(self.config.env_name)

        archives = self.extractor.list_sources()
        if not archives:
            raise ExportError(f"No API archives were exported to {self.export_dir}")
        logger.info(f"Exported {len(archives)} API archive(s) to {self.export_dir}")

    def migrate_archives(self) -> MigrationReport:
        """Process every exported archive exactly once."""
        if self.report is None:
            self.report = MigrationReport(dry_run=self.config.dry_run)

        for extraction in self.extractor.stream():
            self.report.record(self.process_extraction(extraction))

        return self.report

    def process_extraction(self, extraction: ExtractionResult) -> RecordResult:
        """Take one extracted archive to a terminal state."""
        if not extraction.success:
            return RecordResult(
                source_file=extraction.source_file,
                status=RecordStatus.FAILED,
                message=extraction.error,
            )

        record = extraction.record
        try:
            return self.process_record(record)
        except RecordError as e:
            logger.error(f"Could not migrate {record.name}: {e}")
            return self._result(record, RecordStatus.FAILED, str(e))

    def process_record(self, record: ApiRecord) -> RecordResult:
        """
        Check, import and classify a single record.

        Raises:
            RecordError: If the destination cannot be queried
        """
        self.validator.validate_record(record)

        if self.duplicate_checker.is_duplicate(record.name, record.listen_path, record.target_url):
            logger.info(f"Skipped {record.name}: already exists at {record.listen_path}")
            return self._result(record, RecordStatus.SKIPPED, "already exists")

        result = self.loader.load_record(record)
        if result.success:
            if self.config.dry_run:
                logger.info(f"Would migrate {record.name}")
            else:
                logger.info(f"Migrated {record.name}")
            return self._result(record, RecordStatus.MIGRATED, result.message)

        logger.error(f"Could not migrate {record.name}: {result.message}")
        return self._result(record, RecordStatus.FAILED, result.message)

    def _result(self, record: ApiRecord, status: RecordStatus, message: Optional[str]) -> RecordResult:
        record.status = status
        return RecordResult(
            source_file=record.source_file or "",
            status=status,
            name=record.name,
            message=message,
            warnings=list(record.warnings),
        )

    def _confirm(self, question: str) -> bool:
        if self.config.assume_yes:
            return True
        try:
            answer = self._prompt(question)
        except EOFError:
            return False
        return answer.strip() in ("y", "Y")

    def _save_report(self):
        """Save the migration report."""
        report_dir = Path(self.config.report_dir).expanduser()
        report_dir.mkdir(parents=True, exist_ok=True)
        filepath = report_dir / f"migration_report_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.json"
        data = self.report.to_dict()
        data["config"] = self.config.to_dict()
        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2, default=str)
        logger.info(f"Saved migration report to {filepath}")
