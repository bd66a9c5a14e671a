## routes.py
from __future__ import annotations

import hmac

from flask import Blueprint, Response, abort, current_app, jsonify, render_template, request

from audit_web.config import AppSettings
from audit_web.domain.errors import AuditBusyError, InvalidReportNameError, ReportNotFoundError
from audit_web.repositories.report_repository import ReportRepository
from audit_web.services.audit_service import AuditService


def _request_fields() -> dict:
    if request.is_json:
        body = request.get_json(silent=True)
        return body if isinstance(body, dict) else {}
    return request.form.to_dict()


def create_blueprint(audit_service: AuditService, report_repo: ReportRepository, settings: AppSettings) -> Blueprint:
    bp = Blueprint("web", __name__)

    @bp.post("/audit")
    def start_audit():
        fields = _request_fields()
        password = str(fields.get("password") or "")
        url_raw = str(fields.get("url") or "")

        if not password:
            return jsonify(error="Missing password"), 400
        if not settings.password or not hmac.compare_digest(password.encode(), settings.password.encode()):
            return jsonify(error="Invalid password"), 401

        try:
            target_url = audit_service.start(url_raw)
        except AuditBusyError as e:
            current_app.logger.info("Rejected audit request, busy: %s", e)
            return jsonify(error="busy", message=str(e)), 409
        except ValueError as e:
            return jsonify(error=str(e)), 400

        current_app.logger.info("Audit started for %s", target_url)
        return jsonify(
            status="started",
            message=f"Audit started for {target_url}",
            note="The auditor runs in the background. A notification is sent when it completes.",
        ), 202

    @bp.get("/health")
    def health():
        return jsonify(status="ok", audit_running=audit_service.is_running)

    @bp.get("/reports")
    def list_reports():
        reports = report_repo.list_reports()
        current_app.logger.info("Reports listed: %d", len(reports))
        return render_template("reports.html", reports=reports, running=audit_service.is_running)

    @bp.get("/report/<path:filename>")
    def view_report(filename: str):
        try:
            content = report_repo.get(filename)
        except InvalidReportNameError:
            current_app.logger.warning("Rejected report name %r", filename)
            abort(400)
        except ReportNotFoundError:
            abort(404)
        return Response(content, mimetype="text/html")

    return bp
