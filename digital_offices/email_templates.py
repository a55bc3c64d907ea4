"""
Email templates for Digital Offices.

Each template function returns ``(subject, html, text)`` so that every
provider can send a multipart message.
"""

BRAND = "Digital Offices"
VERIFICATION_LINK_HOURS = 24


def email_verification_template(first_name: str, verification_link: str) -> tuple[str, str, str]:
    subject = f"Verify Your Email Address - {BRAND}"

    html = f"""
<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Verify Your Email</title>
  </head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background-color: #f4f4f4; padding: 20px; border-radius: 5px;">
      <h1 style="color: #333;">Verify Your Email Address</h1>
      <p>Hi {first_name},</p>
      <p>Thank you for registering with {BRAND}! Please verify your email address by clicking the button below:</p>
      <div style="text-align: center; margin: 30px 0;">
        <a href="{verification_link}" style="background-color: #007bff; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; display: inline-block;">Verify Email</a>
      </div>
      <p>Or copy and paste this link into your browser:</p>
      <p style="word-break: break-all; color: #666;">{verification_link}</p>
      <p style="color: #666; font-size: 12px; margin-top: 30px;">This link will expire in {VERIFICATION_LINK_HOURS} hours.</p>
      <p style="color: #666; font-size: 12px;">If you didn't create an account, you can safely ignore this email.</p>
    </div>
  </body>
</html>
"""

    text = f"""Verify Your Email Address

Hi {first_name},

Thank you for registering with {BRAND}! Please verify your email address by visiting:

{verification_link}

This link will expire in {VERIFICATION_LINK_HOURS} hours.

If you didn't create an account, you can safely ignore this email.
"""
    return subject, html, text
