from __future__ import annotations

import json
import re
from pathlib import Path

from domain.models import (
    AppConfig,
    EmailConfig,
    EmailMode,
    EmailProvider,
    TemplateQuestion,
    UserConfiguration,
)
from domain.services.platforms import resolve_platform


class ConfigValidationError(ValueError):
    """Raised when a configuration file cannot be turned into domain objects."""


_REQUIRED_PROFILE_KEYS = {"platforms", "job_titles"}
_PLACEHOLDER_PATTERN = re.compile(r"^YOUR_", re.IGNORECASE)
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_QUESTION_TYPES = {"text", "select", "boolean"}


class FileSystemConfigProvider:
    """Reads config.json, profile.json and questions.json from a config directory.

    Every public method re-reads from disk so that edits
    to the JSON files take effect without restarting the app.
    """

    def __init__(self, config_dir: str) -> None:
        self._config_dir = Path(config_dir)

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def validate(self) -> list[str]:
        errors: list[str] = []
        config_data = self._validate_json_file(self._config_dir / "config.json", set(), errors)
        profile_data = self._validate_json_file(
            self._config_dir / "profile.json", _REQUIRED_PROFILE_KEYS, errors,
        )

        if config_data is not None:
            errors.extend(self._validate_config_formats(config_data))
        if profile_data is not None:
            errors.extend(self._validate_profile_formats(profile_data))

        questions_path = self._config_dir / "questions.json"
        if questions_path.is_file():
            try:
                self.get_template_questions()
            except ConfigValidationError as exc:
                errors.append(str(exc))

        return errors

    @staticmethod
    def _validate_config_formats(data: dict) -> list[str]:
        errors: list[str] = []
        for key in ("DELAY_BETWEEN_ACTIONS_MS", "MAX_JOBS_PER_SESSION", "SMTP_PORT"):
            value = data.get(key)
            if value is not None and (not isinstance(value, int) or isinstance(value, bool) or value < 0):
                errors.append(f"{key} must be a non-negative integer.")

        provider = data.get("EMAIL_PROVIDER")
        if provider is not None and provider not in {p.value for p in EmailProvider}:
            errors.append(
                f"EMAIL_PROVIDER '{provider}' is not one of: "
                + ", ".join(p.value for p in EmailProvider),
            )

        smtp_email = str(data.get("SMTP_EMAIL", ""))
        if smtp_email and not _EMAIL_PATTERN.match(smtp_email):
            errors.append(f"SMTP_EMAIL '{smtp_email}' is not a valid email address.")

        for key in ("LINKEDIN_PASSWORD", "KARIYER_PASSWORD", "SMTP_PASSWORD"):
            if _PLACEHOLDER_PATTERN.search(str(data.get(key, ""))):
                errors.append(f"{key} is a placeholder. Set the real value in config.json.")

        starttls = data.get("SMTP_STARTTLS")
        if starttls is not None and not isinstance(starttls, bool):
            errors.append("SMTP_STARTTLS must be a boolean (true/false), not a string.")

        return errors

    @staticmethod
    def _validate_profile_formats(data: dict) -> list[str]:
        errors: list[str] = []
        platforms = data.get("platforms")
        if not isinstance(platforms, list) or not platforms:
            errors.append("profile.json: platforms must be a non-empty list.")
        else:
            for name in platforms:
                if resolve_platform(str(name)) is None:
                    errors.append(f"profile.json: unknown platform '{name}'.")

        titles = data.get("job_titles")
        if not isinstance(titles, list) or not [t for t in titles if str(t).strip()]:
            errors.append("profile.json: job_titles must list at least one title.")

        mode = data.get("email_mode", EmailMode.DRAFT.value)
        if mode not in {m.value for m in EmailMode}:
            errors.append(f"profile.json: email_mode '{mode}' must be 'draft' or 'send'.")

        cv_path = data.get("cv_file_path")
        if cv_path and not Path(cv_path).is_file():
            errors.append(f"profile.json: CV not found at {cv_path}.")

        answers = data.get("template_answers", {})
        if not isinstance(answers, dict):
            errors.append("profile.json: template_answers must be an object of strings.")

        show_browser = data.get("show_browser")
        if show_browser is not None and not isinstance(show_browser, bool):
            errors.append("profile.json: show_browser must be a boolean (true/false).")

        return errors

    def get_app_config(self) -> AppConfig:
        data = self._read_json("config.json")
        try:
            return AppConfig(
                linkedin_email=str(data.get("LINKEDIN_EMAIL", "")),
                linkedin_password=str(data.get("LINKEDIN_PASSWORD", "")),
                kariyer_email=str(data.get("KARIYER_EMAIL", "")),
                kariyer_password=str(data.get("KARIYER_PASSWORD", "")),
                delay_between_actions_ms=int(data.get("DELAY_BETWEEN_ACTIONS_MS", 2000)),
                max_jobs_per_session=int(data.get("MAX_JOBS_PER_SESSION", 50)),
                search_location=str(data.get("SEARCH_LOCATION", "Turkey")),
                drafts_dir=str(data.get("DRAFTS_DIR", "drafts")),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigValidationError(f"config.json: {exc}") from exc

    def get_email_config(self) -> EmailConfig:
        data = self._read_json("config.json")
        try:
            provider = EmailProvider(data.get("EMAIL_PROVIDER", EmailProvider.GMAIL.value))
            defaults = provider_defaults(provider)
            return EmailConfig(
                smtp_server=str(data.get("SMTP_SERVER") or defaults.smtp_server),
                smtp_port=int(data.get("SMTP_PORT", defaults.smtp_port)),
                email=str(data.get("SMTP_EMAIL", "")),
                password=str(data.get("SMTP_PASSWORD", "")),
                sender_name=str(data.get("SENDER_NAME", "")),
                use_starttls=bool(data.get("SMTP_STARTTLS", defaults.use_starttls)),
                provider=provider,
            )
        except (TypeError, ValueError) as exc:
            raise ConfigValidationError(f"config.json: {exc}") from exc

    def get_user_configuration(self) -> UserConfiguration:
        data = self._read_json("profile.json")
        missing = _REQUIRED_PROFILE_KEYS - set(data.keys())
        if missing:
            raise ConfigValidationError(
                f"profile.json missing keys: {', '.join(sorted(missing))}",
            )
        try:
            return UserConfiguration(
                platforms=tuple(str(p) for p in data["platforms"]),
                job_titles=tuple(str(t).strip() for t in data["job_titles"] if str(t).strip()),
                cv_file_path=str(data.get("cv_file_path", "")),
                email_mode=EmailMode(data.get("email_mode", EmailMode.DRAFT.value)),
                show_browser=bool(data.get("show_browser", False)),
                template_answers={
                    str(k): str(v) for k, v in dict(data.get("template_answers", {})).items()
                },
            )
        except (TypeError, ValueError) as exc:
            raise ConfigValidationError(f"profile.json: {exc}") from exc

    def get_template_questions(self) -> tuple[TemplateQuestion, ...]:
        """Load the question catalogue; a missing questions.json yields an empty catalogue."""
        if not (self._config_dir / "questions.json").is_file():
            return ()
        data = self._read_json("questions.json")
        if not isinstance(data, list):
            raise ConfigValidationError("questions.json must contain a list of questions.")

        questions: list[TemplateQuestion] = []
        for index, entry in enumerate(data):
            if not isinstance(entry, dict) or not entry.get("key"):
                raise ConfigValidationError(f"questions.json: entry {index} has no key.")
            kind = entry.get("type", "text")
            if kind not in _QUESTION_TYPES:
                raise ConfigValidationError(
                    f"questions.json: entry '{entry['key']}' has unknown type '{kind}'.",
                )
            questions.append(
                TemplateQuestion(
                    key=str(entry["key"]),
                    question=str(entry.get("question", "")),
                    type=kind,
                    options=tuple(str(o) for o in entry.get("options", [])),
                    keywords=tuple(str(k) for k in entry.get("keywords", [])),
                ),
            )
        return tuple(questions)

    # -- internal helpers ---------------------------------------------------

    def _read_json(self, filename: str):
        path = self._config_dir / filename
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigValidationError(f"Missing file: {path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigValidationError(f"Cannot parse {path}: {exc}") from exc

    @staticmethod
    def _validate_json_file(
        path: Path,
        required_keys: set[str],
        errors: list[str],
    ) -> dict | None:
        """Validate a JSON file exists and has required keys.

        Returns the parsed dict on success, or None if the file
        is missing or unparseable.
        """
        if not path.is_file():
            errors.append(f"Missing file: {path}")
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            errors.append(f"Cannot read {path}: {exc}")
            return None
        if not isinstance(data, dict):
            errors.append(f"{path.name} must contain a JSON object.")
            return None
        missing = required_keys - set(data.keys())
        if missing:
            errors.append(f"{path.name} missing keys: {', '.join(sorted(missing))}")
            return None
        return data


def provider_defaults(provider: EmailProvider) -> EmailConfig:
    """SMTP presets for the well-known providers."""
    if provider is EmailProvider.GMAIL:
        return EmailConfig(smtp_server="smtp.gmail.com", smtp_port=587, provider=provider)
    if provider is EmailProvider.OUTLOOK:
        return EmailConfig(smtp_server="smtp-mail.outlook.com", smtp_port=587, provider=provider)
    return EmailConfig(smtp_port=587, provider=EmailProvider.OTHER)
