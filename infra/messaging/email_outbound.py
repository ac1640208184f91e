from __future__ import annotations

import asyncio
import mimetypes
import re
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Callable

from domain.models import EmailConfig, EmailMode, Posting, UserConfiguration
from domain.ports import ClockPort, LoggerPort

SmtpFactory = Callable[[str, int], smtplib.SMTP]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.-]+")


def compose_body(posting: Posting, configuration: UserConfiguration, config: EmailConfig) -> str:
    """Build the plain-text application letter from the posting and template answers."""
    answers = configuration.template_answers
    lines = [
        "Dear Hiring Manager,",
        "",
        "I hope this email finds you well. I am writing to express my strong interest "
        f"in the {posting.title} position at {posting.company} that I found on "
        f"{posting.platform.value}.",
        "",
    ]

    if answers.get("experience_level"):
        lines.append(
            f"As a {answers['experience_level'].lower()} professional, "
            "I believe I would be a great fit for this role.",
        )
    if answers.get("tech_stack"):
        lines.append(f"My technical expertise includes: {answers['tech_stack']}.")
    if answers.get("years_of_experience"):
        lines.append(
            f"I have {answers['years_of_experience']} years of professional experience "
            "in software development.",
        )

    lines += [
        "",
        "I am particularly drawn to this opportunity because of your company's reputation "
        "and the interesting challenges this role presents. I would welcome the opportunity "
        "to discuss how my skills and enthusiasm can contribute to your team's success.",
        "",
    ]

    if answers.get("currently_working") == "Yes":
        if answers.get("notice_period"):
            lines.append(
                f"I am currently employed but can start with {answers['notice_period']} "
                "notice period.",
            )
    else:
        lines.append("I am immediately available to start.")

    if answers.get("location_preference"):
        lines.append(
            f"I am open to {answers['location_preference'].lower()} work arrangements.",
        )

    lines += [
        "",
        "I have attached my resume for your review. I would be happy to provide any "
        "additional information you might need and am available for an interview at "
        "your convenience.",
        "",
        "Thank you for considering my application. I look forward to hearing from you soon.",
        "",
        "Best regards,",
        config.sender_name,
        config.email,
    ]
    return "\n".join(lines) + "\n"


class EmailOutbound:
    """
    ``OutboundMessagePort`` that drafts or sends application emails.

    In ``EmailMode.DRAFT`` the message is written as an ``.eml`` file under
    ``drafts_dir``; in ``EmailMode.SEND`` it is delivered over SMTP. Blocking
    I/O runs in a worker thread. Failures are logged and reported as
    ``False``; nothing is raised to the caller.
    """

    def __init__(
        self,
        config: EmailConfig,
        *,
        drafts_dir: str,
        clock: ClockPort,
        logger: LoggerPort,
        smtp_factory: SmtpFactory = smtplib.SMTP,
    ) -> None:
        self._config = config
        self._drafts_dir = Path(drafts_dir)
        self._clock = clock
        self._logger = logger
        self._smtp_factory = smtp_factory

    async def send_application(
        self,
        posting: Posting,
        configuration: UserConfiguration,
    ) -> bool:
        try:
            message = self.build_message(posting, configuration)
            if configuration.email_mode is EmailMode.DRAFT:
                path = await asyncio.to_thread(self._save_draft, message, posting)
                self._logger.info(
                    "email_draft_saved",
                    company=posting.company,
                    title=posting.title,
                    path=str(path),
                )
            else:
                await asyncio.to_thread(self._deliver, message)
                self._logger.info(
                    "email_sent",
                    company=posting.company,
                    title=posting.title,
                    to=posting.contact_email,
                )
            return True
        except Exception as exc:
            self._logger.error(
                "email_application_failed",
                company=posting.company,
                title=posting.title,
                error=str(exc),
            )
            return False

    def build_message(self, posting: Posting, configuration: UserConfiguration) -> EmailMessage:
        message = EmailMessage()
        message["From"] = (
            f"{self._config.sender_name} <{self._config.email}>"
            if self._config.sender_name
            else self._config.email
        )
        message["To"] = posting.contact_email
        message["Subject"] = f"Application for {posting.title} Position - {self._config.sender_name}"
        message.set_content(compose_body(posting, configuration, self._config))

        cv_path = Path(configuration.cv_file_path) if configuration.cv_file_path else None
        if cv_path is not None and cv_path.is_file():
            mime, _ = mimetypes.guess_type(cv_path.name)
            maintype, subtype = (mime or "application/octet-stream").split("/", 1)
            message.add_attachment(
                cv_path.read_bytes(),
                maintype=maintype,
                subtype=subtype,
                filename=cv_path.name,
            )
        else:
            self._logger.warning("cv_file_not_found", path=configuration.cv_file_path)
        return message

    async def test_connection(self) -> bool:
        try:
            await asyncio.to_thread(self._login_only)
        except Exception as exc:
            self._logger.error(
                "email_connection_failed",
                server=self._config.smtp_server,
                port=self._config.smtp_port,
                error=str(exc),
            )
            return False
        self._logger.info(
            "email_connection_ok",
            server=self._config.smtp_server,
            port=self._config.smtp_port,
        )
        return True

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not self._config.email:
            errors.append("Email address is required")
        if not self._config.password:
            errors.append("Email password is required")
        if not self._config.smtp_server:
            errors.append("SMTP server is required")
        if self._config.smtp_port <= 0:
            errors.append("Valid SMTP port is required")
        if not self._config.sender_name:
            errors.append("Sender name is required")
        return errors

    # -- blocking helpers ---------------------------------------------------

    def _save_draft(self, message: EmailMessage, posting: Posting) -> Path:
        self._drafts_dir.mkdir(parents=True, exist_ok=True)
        stamp = self._clock.now().strftime("%Y%m%d_%H%M%S")
        stem = _UNSAFE_FILENAME_CHARS.sub("_", f"{posting.company}_{posting.title}_{stamp}")
        path = self._drafts_dir / f"{stem}.eml"
        path.write_bytes(bytes(message))
        return path

    def _deliver(self, message: EmailMessage) -> None:
        with self._smtp_factory(self._config.smtp_server, self._config.smtp_port) as server:
            if self._config.use_starttls:
                server.starttls()
            server.login(self._config.email, self._config.password)
            server.send_message(message)

    def _login_only(self) -> None:
        with self._smtp_factory(self._config.smtp_server, self._config.smtp_port) as server:
            if self._config.use_starttls:
                server.starttls()
            server.login(self._config.email, self._config.password)
