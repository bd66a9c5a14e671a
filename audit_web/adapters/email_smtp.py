from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from audit_web.domain.models import PERFORMANCE_BUDGET, SEO_BUDGET, AuditResult
from audit_web.renderers.html_renderer import render_template

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpNotifier:
    """
    Notifier adapter: sends audit outcomes as HTML mail over SMTP (SSL).
    Defaults match Gmail with an app password.
    """
    user: str
    app_password: str
    to_addr: str
    server_url: str
    host: str = "smtp.gmail.com"
    port: int = 465
    timeout_seconds: int = 30

    def report_link(self, report_filename: Optional[str]) -> Optional[str]:
        if not report_filename:
            return None
        return f"{self.server_url.rstrip('/')}/report/{report_filename}"

    def send_report(
        self,
        result: AuditResult,
        is_partial: bool,
        exit_code: Optional[int],
        report_filename: Optional[str],
    ) -> None:
        status = "PARTIAL" if is_partial else ("PASS" if not result.failed_pages else "NEEDS WORK")
        subject = (
            f"[Lighthouse] {status} {result.url} - "
            f"perf {result.summary.performance}, SEO {result.summary.seo}"
        )
        html = render_template(
            "email_report.html",
            result=result,
            is_partial=is_partial,
            exit_code=exit_code,
            report_link=self.report_link(report_filename),
            performance_budget=PERFORMANCE_BUDGET,
            seo_budget=SEO_BUDGET,
        )
        self._send(subject, html)

    def send_failure(self, target_url: str, exit_code: Optional[int], diagnostic_text: str) -> None:
        subject = f"[Lighthouse] FAILED {target_url}"
        html = render_template(
            "email_failure.html",
            target_url=target_url,
            exit_code=exit_code,
            diagnostic_text="\n".join((diagnostic_text or "").splitlines()[-60:]),
        )
        self._send(subject, html)

    def _send(self, subject: str, html: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.user
        msg["To"] = self.to_addr
        msg.attach(MIMEText(html, "html", "utf-8"))

        with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout_seconds) as s:
            s.login(self.user, self.app_password)
            s.sendmail(self.user, [a.strip() for a in self.to_addr.split(",") if a.strip()], msg.as_string())
        log.info("Mail sent to %s: %s", self.to_addr, subject)
