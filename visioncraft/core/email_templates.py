"""
Notification email templates.

All user-supplied values go through ``escape_html`` before they are placed
into markup.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from visioncraft.models.contact import ContactSubmission
from visioncraft.models.upload import ImageUpload, UploadClientInfo

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}


@dataclass
class OutgoingEmail:
    subject: str
    html: str
    text: str
    reply_to: Optional[str] = None


def escape_html(value: Optional[str]) -> str:
    if not value:
        return ""
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in str(value))


def _multiline(value: str) -> str:
    return escape_html(value).replace("\r\n", "\n").replace("\n", "<br/>")


def _timestamp(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def contact_email(submission: ContactSubmission) -> OutgoingEmail:
    name = escape_html(submission.name)
    email = escape_html(submission.email)
    phone_html = ""
    if submission.phone:
        phone = escape_html(submission.phone)
        phone_html = f'<p><strong>Phone:</strong> <a href="tel:{phone}">{phone}</a></p>'

    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333; border-bottom: 2px solid #007bff; padding-bottom: 10px;">
            New Contact Form Submission
          </h2>
          <div style="background: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <h3 style="margin-top: 0; color: #007bff;">Contact Details</h3>
            <p><strong>Name:</strong> {name}</p>
            <p><strong>Email:</strong> <a href="mailto:{email}">{email}</a></p>
            {phone_html}
          </div>
          <div style="background: #fff; border: 1px solid #dee2e6; padding: 20px; border-radius: 8px;">
            <h3 style="margin-top: 0; color: #333;">Message</h3>
            <p style="line-height: 1.6;">{_multiline(submission.message)}</p>
          </div>
          <div style="margin-top: 30px; padding: 15px; background: #e9ecef; border-radius: 8px; font-size: 12px; color: #6c757d;">
            <p>This email was sent from the VisionCraft Labs website contact form.</p>
            <p>Submission #{submission.id}, received at: {_timestamp(submission.createdAt)}</p>
          </div>
        </div>
    """

    text_lines = [f"Name: {submission.name}", f"Email: {submission.email}"]
    if submission.phone:
        text_lines.append(f"Phone: {submission.phone}")
    text_lines += ["", submission.message]

    # Subject is a header, not markup; strip line breaks so it stays one header
    subject_name = " ".join(submission.name.split())
    return OutgoingEmail(
        subject=f"New contact form message from {subject_name}",
        html=html,
        text="\n".join(text_lines),
        reply_to=submission.email,
    )


def upload_email(record: ImageUpload, client_info: UploadClientInfo) -> OutgoingEmail:
    if client_info.has_any():
        rows = []
        if client_info.clientName:
            rows.append(f"<p><strong>Name:</strong> {escape_html(client_info.clientName)}</p>")
        if client_info.clientEmail:
            email = escape_html(client_info.clientEmail)
            rows.append(f'<p><strong>Email:</strong> <a href="mailto:{email}">{email}</a></p>')
        if client_info.clientPhone:
            phone = escape_html(client_info.clientPhone)
            rows.append(f'<p><strong>Phone:</strong> <a href="tel:{phone}">{phone}</a></p>')
        client_html = f"""
          <div style="background: #fff; border: 1px solid #dee2e6; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <h3 style="margin-top: 0; color: #333;">Client Information</h3>
            {"".join(rows)}
          </div>
        """
    else:
        client_html = """
          <div style="background: #fff3cd; border: 1px solid #ffeaa7; padding: 15px; border-radius: 8px; margin: 20px 0;">
            <p style="margin: 0; color: #856404;"><strong>Note:</strong> No client contact information was provided with this upload.</p>
          </div>
        """

    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333; border-bottom: 2px solid #28a745; padding-bottom: 10px;">
            New Image Upload for Preview
          </h2>
          <div style="background: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <h3 style="margin-top: 0; color: #28a745;">Upload Details</h3>
            <p><strong>Original File Name:</strong> {escape_html(record.originalName)}</p>
            <p><strong>Server File Name:</strong> {escape_html(record.fileName)}</p>
            <p><strong>Size:</strong> {escape_html(record.fileSize)} bytes</p>
            <p><strong>Upload Time:</strong> {_timestamp(record.createdAt)}</p>
          </div>
          {client_html}
          <div style="background: #d1ecf1; border: 1px solid #b8daff; padding: 15px; border-radius: 8px; margin: 20px 0;">
            <p style="margin: 0; color: #0c5460;"><strong>Next Steps:</strong> Open the uploaded image and prepare the preview transformation.</p>
          </div>
          <div style="margin-top: 30px; padding: 15px; background: #e9ecef; border-radius: 8px; font-size: 12px; color: #6c757d;">
            <p>This email was sent from the VisionCraft Labs image upload system.</p>
          </div>
        </div>
    """

    text_lines = [
        f"Original file name: {record.originalName}",
        f"Server file name: {record.fileName}",
        f"Size: {record.fileSize} bytes",
    ]
    if client_info.has_any():
        text_lines.append("")
        if client_info.clientName:
            text_lines.append(f"Name: {client_info.clientName}")
        if client_info.clientEmail:
            text_lines.append(f"Email: {client_info.clientEmail}")
        if client_info.clientPhone:
            text_lines.append(f"Phone: {client_info.clientPhone}")
    else:
        text_lines += ["", "No client contact information was provided with this upload."]

    original_name = " ".join(record.originalName.split())
    return OutgoingEmail(
        subject=f"New Image Upload - {original_name}",
        html=html,
        text="\n".join(text_lines),
    )


def diagnostic_email() -> OutgoingEmail:
    return OutgoingEmail(
        subject="VisionCraft Labs notification test",
        html="<p>This is a test email sent from the VisionCraft Labs backend.</p>",
        text="This is a test email sent from the VisionCraft Labs backend.",
    )
