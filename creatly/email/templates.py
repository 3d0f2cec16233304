"""Email templates for Creatly."""

import html
from datetime import datetime


BASE_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title} - {school_name}</title>
</head>
<body style="margin: 0; padding: 0; background-color: #F7F8FA; font-family: -apple-system, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" border="0">
    <tr>
      <td align="center" style="padding: 40px 16px;">
        <table role="presentation" width="600" cellspacing="0" cellpadding="0" border="0"
               style="max-width: 600px; background-color: #FFFFFF; border-radius: 12px;">
          <tr>
            <td style="padding: 40px 32px;">
              {content}
            </td>
          </tr>
          <tr>
            <td style="padding: 16px 32px; border-top: 1px solid #E5E7EB; font-size: 12px; color: #8E959E;">
              &copy; {year} {school_name}. This email was sent automatically, please do not reply.
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""


VERIFICATION_CODE_CONTENT = """
<h1 style="margin: 0 0 16px; font-size: 24px; font-weight: 600; color: #1A1D23;">
  Confirm your email
</h1>

<p style="margin: 0 0 24px; font-size: 16px; color: #4B5563; line-height: 1.6;">
  Hi, <strong style="color: #1A1D23;">{name}</strong>! Thanks for signing up.
  Use the code below to verify your account.
</p>

<div style="background-color: #F3F4F6; border-radius: 12px; padding: 24px; text-align: center; margin: 0 0 24px;">
  <span style="font-size: 32px; font-weight: 700; letter-spacing: 6px; color: #1A1D23; font-family: monospace;">
    {code}
  </span>
</div>

<p style="margin: 0; font-size: 14px; color: #6B7280; line-height: 1.6;">
  The code can be used once. If you did not create an account, ignore this email.
</p>
"""


def render_verification_code(
    name: str, code: str, school_name: str = "Creatly"
) -> tuple[str, str]:
    """Render the sign-up verification email.

    Returns:
        Tuple of (html_content, plain_text_content)
    """
    year = datetime.now().year
    content = VERIFICATION_CODE_CONTENT.format(name=html.escape(name), code=code)
    body = BASE_TEMPLATE.format(
        title="Confirm your email",
        content=content,
        school_name=school_name,
        year=year,
    )

    plain_text = f"""
Confirm your email - {school_name}

Hi, {name}! Thanks for signing up.

Your verification code: {code}

The code can be used once. If you did not create an account, ignore this email.

---
(c) {year} {school_name}.
"""
    return body, plain_text.strip()
