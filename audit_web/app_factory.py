from __future__ import annotations

import logging
from typing import Optional

from flask import Flask

from audit_web.adapters.email_smtp import SmtpNotifier
from audit_web.config.ini_config import AppSettings, IniConfig
from audit_web.log_setup import setup_logging
from audit_web.repositories.report_repository import ReportRepository
from audit_web.services.audit_service import AuditService
from audit_web.services.notifier import LoggingNotifier, Notifier
from audit_web.services.process_runner import ProcessRunner
from audit_web.services.url_normalization import GuessComUrlNormalizer
from audit_web.web.routes import create_blueprint

log = logging.getLogger(__name__)


def build_notifier(settings: AppSettings) -> Notifier:
    if not settings.email_configured:
        log.warning("Email not configured (GMAIL_USER / GMAIL_APP_PASSWORD / GMAIL_TO); outcomes are only logged.")
        return LoggingNotifier()

    log.info("Audit reports will be mailed to %s", settings.gmail_to)
    return SmtpNotifier(
        user=settings.gmail_user,
        app_password=settings.gmail_app_password,
        to_addr=settings.gmail_to,
        server_url=settings.server_url,
        host=settings.smtp_host,
        port=settings.smtp_port,
    )


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    notifier: Optional[Notifier] = None,
    runner: Optional[ProcessRunner] = None,
) -> Flask:
    """Composition root: loads settings and wires runner, repository, notifier and service."""
    if settings is None:
        settings = IniConfig.from_env_or_default().load_settings()
    setup_logging(settings.log_level)

    if not settings.password:
        log.warning("No audit password configured; every audit request will be rejected.")

    url_norm = GuessComUrlNormalizer(
        default_scheme=settings.default_scheme,
        guess_com_if_no_dot=settings.guess_com_if_no_dot,
        no_guess_hosts=settings.no_guess_hosts,
    )

    report_repo = ReportRepository(reports_dir=settings.reports_dir)

    if runner is None:
        runner = ProcessRunner(
            command=settings.auditor_command,
            config_file=settings.auditor_config_file,
            work_dir=settings.work_dir,
            device=settings.device,
        )

    audit_service = AuditService(
        runner=runner,
        report_repo=report_repo,
        notifier=notifier or build_notifier(settings),
        url_normalizer=url_norm,
        result_path=settings.result_file,
        default_url=settings.default_url,
        timeout_seconds=settings.timeout_seconds or None,
    )

    app = Flask(__name__)
    app.register_blueprint(create_blueprint(audit_service, report_repo, settings))
    app.extensions["audit_service"] = audit_service

    app.config["HOST"] = settings.flask_host
    app.config["PORT"] = settings.flask_port
    app.config["DEBUG"] = settings.flask_debug

    return app
