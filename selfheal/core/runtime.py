from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from selfheal.config.schema import SuiteConfig
from selfheal.core.actions import SafeActions
from selfheal.core.browser import BrowserSession
from selfheal.core.document import SeleniumDocument
from selfheal.core.healer import SelfHealingEngine
from selfheal.core.metadata import HealContext
from selfheal.core.store import FingerprintStore
from selfheal.logging.artifacts import ArtifactManager
from selfheal.logging.audit import HealingAuditLogger
from selfheal.logging.report import HealingReporter

log = logging.getLogger(__name__)


@dataclass(slots=True)
class HealingRuntime:
    driver: object
    browser_session: BrowserSession
    document: SeleniumDocument
    engine: SelfHealingEngine
    artifact_manager: ArtifactManager
    audit_logger: HealingAuditLogger
    actions: SafeActions

    def open(self, url: str | None = None) -> None:
        self.browser_session.open(self.driver, url or self.browser_session.environment.base_url)


def build_engine(
    suite_config: SuiteConfig,
    artifact_manager: ArtifactManager,
    audit_logger: HealingAuditLogger | None = None,
) -> SelfHealingEngine:
    store = FingerprintStore()
    if audit_logger is not None and not suite_config.healing.persist_fingerprints:
        # Without persisted events the audit file covers this run only.
        audit_logger.reset()
    if suite_config.healing.persist_fingerprints:
        snapshot = artifact_manager.read_snapshot()
        if snapshot is not None:
            store.import_state(snapshot)
            log.info("Loaded %d fingerprints from %s", len(snapshot.fingerprints), artifact_manager.snapshot_path)
    return SelfHealingEngine(suite_config.healing, store=store, audit_logger=audit_logger)


def finalize(engine: SelfHealingEngine, artifact_manager: ArtifactManager, audit_logger: HealingAuditLogger) -> None:
    report = HealingReporter().generate(engine.store, failed_attempts=audit_logger.failed_attempts())
    json_path, _ = artifact_manager.write_report(report)
    log.info("Healing report saved to %s (%d events)", json_path, report.total_healing_events)
    if engine.config.persist_fingerprints:
        artifact_manager.write_snapshot(engine.store.export_state())


@contextmanager
def managed_runtime(
    suite_config: SuiteConfig,
    browser_name: str | None = None,
    context: HealContext | None = None,
    driver=None,
) -> Iterator[HealingRuntime]:
    browser_session = BrowserSession(suite_config.environment)
    if driver is None:
        driver = browser_session.start(browser_name)
    artifact_manager = ArtifactManager(suite_config.healing.artifacts_dir)
    audit_logger = HealingAuditLogger(suite_config.healing.artifacts_dir)
    engine = build_engine(suite_config, artifact_manager, audit_logger)
    document = SeleniumDocument(driver)
    runtime = HealingRuntime(
        driver=driver,
        browser_session=browser_session,
        document=document,
        engine=engine,
        artifact_manager=artifact_manager,
        audit_logger=audit_logger,
        actions=SafeActions(document, engine, context),
    )
    try:
        yield runtime
    finally:
        try:
            finalize(engine, artifact_manager, audit_logger)
        finally:
            driver.quit()
