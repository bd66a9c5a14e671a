from .audit_service import AuditService
from .notifier import LoggingNotifier, Notifier
from .outcome_classifier import PARSE_FAILURE_REASON, classify
from .process_runner import ProcessRunner
from .result_parser import build_audit_result, parse_result_file
from .url_normalization import UrlNormalizer, GuessComUrlNormalizer

__all__ = [
    "AuditService",
    "LoggingNotifier",
    "Notifier",
    "PARSE_FAILURE_REASON",
    "classify",
    "ProcessRunner",
    "build_audit_result",
    "parse_result_file",
    "UrlNormalizer",
    "GuessComUrlNormalizer",
]