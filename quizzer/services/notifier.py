"""
Email delivery of quiz results over SMTP.

Delivery is best effort: ``send_results`` returns ``False`` instead of
raising when SMTP is not configured or the send fails.
"""

from __future__ import annotations

import smtplib
from dataclasses import dataclass, field
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from loguru import logger


@dataclass
class QuizSummary:
    username: str
    grade: str
    subject: str
    score: int
    improvement_suggestions: list[str] = field(default_factory=list)


@dataclass
class ScoreSummary:
    correct: int
    total: int


def performance_message(score: int) -> str:
    if score >= 80:
        return "Excellent work! You demonstrated strong understanding."
    elif score >= 60:
        return "Good job! There's room for improvement."
    return "Keep practicing! Focus on the fundamentals."


def render_results_html(quiz: QuizSummary, score: ScoreSummary, frontend_url: str) -> str:
    suggestions = ""
    if quiz.improvement_suggestions:
        items = "".join(f"<li>{escape(s)}</li>" for s in quiz.improvement_suggestions)
        suggestions = f"""
    <div style="background-color: #fff3e0; padding: 15px; border-radius: 8px; margin: 20px 0;">
      <h3 style="margin-top: 0; color: #f57c00;">Improvement Suggestions</h3>
      <ul>{items}</ul>
    </div>"""

    return f"""
  <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2 style="color: #333;">Quiz Results</h2>
    <p>Hello {escape(quiz.username)},</p>
    <div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
      <h3 style="margin-top: 0;">Quiz Summary</h3>
      <p><strong>Subject:</strong> {escape(quiz.subject)}</p>
      <p><strong>Grade Level:</strong> {escape(quiz.grade)}</p>
      <p><strong>Score:</strong> {quiz.score}% ({score.correct}/{score.total} correct)</p>
      <p><strong>Date:</strong> {date.today().isoformat()}</p>
    </div>
    <div style="background-color: #e8f5e8; padding: 15px; border-radius: 8px; margin: 20px 0;">
      <h3 style="margin-top: 0; color: #2e7d32;">Performance Analysis</h3>
      <p>{performance_message(quiz.score)}</p>
    </div>{suggestions}
    <div style="text-align: center; margin: 30px 0;">
      <a href="{escape(frontend_url)}">Take Another Quiz</a>
    </div>
  </div>"""


class EmailNotifier:
    """Sends result emails through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        use_tls: bool = True,
        timeout_seconds: float = 10.0,
        frontend_url: str = "http://localhost:3000",
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user
        self.use_tls = use_tls
        self.timeout_seconds = timeout_seconds
        self.frontend_url = frontend_url

    @property
    def is_configured(self) -> bool:
        return bool(self.user and self.password and self.sender)

    def send_results(self, address: str, quiz: QuizSummary, score: ScoreSummary) -> bool:
        """
        Email a results summary.

        Returns:
            True if the message was handed to the SMTP server
        """
        if not self.is_configured:
            logger.info("Email not configured - skipping results email")
            return False

        message = MIMEMultipart("alternative")
        message["Subject"] = f"Quiz Results - {quiz.subject} (Grade {quiz.grade})"
        message["From"] = self.sender
        message["To"] = address
        message.attach(
            MIMEText(
                f"{quiz.username}, you scored {quiz.score}% ({score.correct}/{score.total}) "
                f"on {quiz.subject}.",
                "plain",
            )
        )
        message.attach(MIMEText(render_results_html(quiz, score, self.frontend_url), "html"))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.user, self.password)
                server.sendmail(self.sender, [address], message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send results email to {address}: {e}")
            return False

        logger.info(f"Quiz results email sent to {address}")
        return True
