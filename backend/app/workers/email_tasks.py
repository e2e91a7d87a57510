"""
Email background tasks.

Project invitation emails.
"""

import logging

from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="app.workers.email_tasks.send_invitation_email", bind=True, max_retries=3)
def send_invitation_email(
    self,  # type: ignore[no-untyped-def]
    to_email: str,
    project_title: str,
    inviter_name: str,
    role: str,
    frontend_url: str,
) -> dict[str, str]:
    """
    Send a project invitation email via Resend.

    Args:
        to_email: Recipient email address.
        project_title: Title of the project the user is invited to.
        inviter_name: Display name of the person who sent the invite.
        role: Role being offered (admin/member).
        frontend_url: Frontend base URL for constructing the invitations link.

    Returns:
        Dict with status and message_id.
    """
    try:
        import resend

        from app.core.config import settings

        resend.api_key = settings.RESEND_API_KEY

        invitations_url = f"{frontend_url}/invitations"

        params: resend.Emails.SendParams = {
            "from": settings.EMAIL_FROM,
            "to": [to_email],
            "subject": f"You've been invited to {project_title} on ProjectHub",
            "html": f"""
                <h2>You've been invited to a project</h2>
                <p><strong>{inviter_name}</strong> has invited you to join
                <strong>{project_title}</strong> as a <strong>{role}</strong>.</p>
                <p>
                    <a href="{invitations_url}"
                       style="background:#6366f1;color:#fff;padding:12px 24px;
                              border-radius:6px;text-decoration:none;display:inline-block;">
                        View Invitation
                    </a>
                </p>
                <p>If you did not expect this invitation, you can safely ignore this email.</p>
            """,
        }

        response = resend.Emails.send(params)
        logger.info("Invitation email sent to %s for project %r", to_email, project_title)
        return {"status": "sent", "message_id": response["id"]}

    except Exception as exc:
        logger.warning("Invitation email to %s failed, retrying: %s", to_email, exc)
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))
