########## ini_config.py

from __future__ import annotations

import os
import shlex
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Optional, Tuple

INI_DEFAULT_NAME = "audit_web.ini"
REPO_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class AppSettings:
    auditor_command: Tuple[str, ...]
    auditor_config_file: Path
    device: str
    work_dir: Path
    result_file: Path
    timeout_seconds: int                # 0 = no limit
    reports_dir: Path

    default_url: str
    password: str

    default_scheme: str
    guess_com_if_no_dot: bool
    no_guess_hosts: FrozenSet[str]

    smtp_host: str
    smtp_port: int
    gmail_user: str
    gmail_app_password: str
    gmail_to: str
    server_url: str

    flask_host: str
    flask_port: int
    flask_debug: bool

    log_level: str

    @property
    def email_configured(self) -> bool:
        return bool(self.gmail_user and self.gmail_app_password and self.gmail_to)


class IniConfig:
    """
    Adapter around ConfigParser and filesystem resolution.
    Keeps INI handling out of the service code. Relative paths resolve against the INI's folder.
    """

    def __init__(self, ini_path: Optional[Path], *, required: bool = True):
        self._ini_path = ini_path
        self._cfg = ConfigParser()
        read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig") if ini_path else []
        if not read_ok and required:
            raise FileNotFoundError(f"INI file not found or unreadable: {ini_path}")
        self._base_dir = ini_path.resolve().parent if (ini_path and read_ok) else REPO_ROOT

    @staticmethod
    def from_env_or_default() -> "IniConfig":
        ini_raw = (os.getenv("APP_INI") or "").strip()
        if ini_raw:
            return IniConfig(Path(ini_raw))
        # No APP_INI: the repo-root ini is optional, built-in defaults apply without it
        return IniConfig(REPO_ROOT / INI_DEFAULT_NAME, required=False)

    def _get(self, section: str, key: str, fallback: str = "", env: Optional[str] = None) -> str:
        if env:
            from_env = (os.getenv(env) or "").strip()
            if from_env:
                return from_env
        return (self._cfg.get(section, key, fallback=fallback) or "").strip() or fallback

    def _path(self, raw: str, base: Path) -> Path:
        raw = os.path.expandvars(os.path.expanduser(raw))
        p = Path(raw)
        return (p if p.is_absolute() else base / p).resolve()

    def load_settings(self) -> AppSettings:
        # Auditor
        work_dir = self._path(self._get("auditor", "work_dir", "."), self._base_dir)
        auditor_command = tuple(shlex.split(self._get("auditor", "command", "npx unlighthouse-ci")))
        if not auditor_command:
            raise ValueError("auditor.command is empty in INI")
        auditor_config_file = self._path(self._get("auditor", "config_file", "unlighthouse.config.ts"), work_dir)
        result_file = self._path(self._get("auditor", "result_file", ".unlighthouse/ci-result.json"), work_dir)
        device = self._get("auditor", "device", "mobile")
        timeout_seconds = self._cfg.getint("auditor", "timeout_seconds", fallback=0)
        if timeout_seconds < 0:
            raise ValueError("auditor.timeout_seconds must be >= 0")

        reports_dir = self._path(self._get("reports", "reports_dir", ".unlighthouse/reports"), work_dir)

        # Audit requests
        default_url = self._get("audit", "default_url", "https://terrariawars.com")
        password = self._get("audit", "password", "", env="AUDIT_PASSWORD")

        # URL normalization
        default_scheme = self._get("url_normalization", "default_scheme", "https")
        guess_com_if_no_dot = self._cfg.getboolean("url_normalization", "guess_com_if_no_dot", fallback=True)
        no_guess_hosts = frozenset(
            h.strip().lower()
            for h in self._get("url_normalization", "no_guess_hosts", "localhost").split(",")
            if h.strip()
        )

        # Flask
        flask_host = self._get("flask", "host", "127.0.0.1")
        flask_port = int(self._get("flask", "port", "3000", env="PORT"))
        flask_debug = self._cfg.getboolean("flask", "debug", fallback=False)

        # Email
        smtp_host = self._get("email", "smtp_host", "smtp.gmail.com")
        smtp_port = self._cfg.getint("email", "smtp_port", fallback=465)
        gmail_user = self._get("email", "user", "", env="GMAIL_USER")
        gmail_app_password = self._get("email", "app_password", "", env="GMAIL_APP_PASSWORD")
        gmail_to = self._get("email", "to", "", env="GMAIL_TO")
        server_url = self._get("server", "server_url", f"http://localhost:{flask_port}", env="SERVER_URL")

        log_level = self._get("logging", "level", "INFO").upper()

        return AppSettings(
            auditor_command=auditor_command,
            auditor_config_file=auditor_config_file,
            device=device,
            work_dir=work_dir,
            result_file=result_file,
            timeout_seconds=timeout_seconds,
            reports_dir=reports_dir,
            default_url=default_url,
            password=password,
            default_scheme=default_scheme,
            guess_com_if_no_dot=guess_com_if_no_dot,
            no_guess_hosts=no_guess_hosts,
            smtp_host=smtp_host,
            smtp_port=smtp_port,
            gmail_user=gmail_user,
            gmail_app_password=gmail_app_password,
            gmail_to=gmail_to,
            server_url=server_url,
            flask_host=flask_host,
            flask_port=flask_port,
            flask_debug=flask_debug,
            log_level=log_level,
        )
