from audit_web.app_factory import create_app


def main() -> None:
    app = create_app()
    # The reloader would fork a second server with its own audit lock.
    app.run(host=app.config["HOST"], port=app.config["PORT"], debug=app.config["DEBUG"], use_reloader=False)


if __name__ == "__main__":
    main()

#############################
#
# Request flow
# •	POST /audit       -> routes.start_audit -> AuditService.start -> ProcessRunner.run (background)
#                        answers {"status": "started"} immediately, 409 while a run is in flight
# •	auditor exits     -> AuditService.handle_completion:
#                        parse_result_file -> classify -> ReportRepository.save -> Notifier
# •	GET /reports      -> ReportRepository.list_reports (newest first)
# •	GET /report/<f>   -> ReportRepository.get (400 bad name, 404 missing)
# •	GET /health       -> {"status": "ok", "audit_running": bool}
#
# Layers
# •	config/        INI + env -> AppSettings
# •	domain/        dataclasses, outcome enum, exceptions (no Flask, no subprocess)
# •	services/      parser, runner, classifier, notifier port, orchestrator, url normalization
# •	repositories/  reports directory (naming, listing, traversal-safe lookup)
# •	renderers/     Jinja2 report rendering
# •	adapters/      SMTP notifier
# •	web/           Flask blueprint, thin
######################################################################
