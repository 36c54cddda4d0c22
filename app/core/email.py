"""
Advocacia SaaS - Email Service
Envio de orçamentos e faturas por email (SMTP)
"""
import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.mime.application import MIMEApplication
from typing import Optional
import logging

from .config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Serviço de envio de emails via SMTP"""

    def __init__(self):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.SMTP_FROM_EMAIL
        self.from_name = settings.SMTP_FROM_NAME
        self.use_tls = settings.SMTP_TLS
        self.use_ssl = settings.SMTP_SSL

    def is_configured(self) -> bool:
        """Verifica se o serviço de email está configurado"""
        return bool(self.user and self.password)

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        attachments: Optional[list[tuple[str, bytes]]] = None
    ) -> bool:
        """
        Envia um email

        Args:
            to_email: Email do destinatário
            subject: Assunto do email
            html_content: Conteúdo HTML do email
            text_content: Conteúdo texto puro (opcional)
            attachments: Lista de (nome_arquivo, conteúdo PDF)

        Returns:
            True se enviado com sucesso, False caso contrário
        """
        if not self.is_configured():
            logger.warning("Serviço de email não configurado. Envio ignorado.")
            return False

        try:
            message = MIMEMultipart("mixed")
            message["Subject"] = subject
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = to_email

            body = MIMEMultipart("alternative")
            if text_content:
                body.attach(MIMEText(text_content, "plain", "utf-8"))
            body.attach(MIMEText(html_content, "html", "utf-8"))
            message.attach(body)

            for filename, content in attachments or []:
                part = MIMEApplication(content, _subtype="pdf")
                part.add_header("Content-Disposition", "attachment", filename=filename)
                message.attach(part)

            if self.use_ssl:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(self.host, self.port, context=context) as server:
                    server.login(self.user, self.password)
                    server.sendmail(self.from_email, to_email, message.as_string())
            else:
                with smtplib.SMTP(self.host, self.port) as server:
                    if self.use_tls:
                        server.starttls()
                    server.login(self.user, self.password)
                    server.sendmail(self.from_email, to_email, message.as_string())

            logger.info(f"Email enviado para {to_email}")
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Falha ao enviar email para {to_email}: {e}")
            return False

    def send_billing_document(
        self,
        to_email: str,
        receiver_name: str,
        sender_name: str,
        document_label: str,
        number: str,
        title: str,
        total: str,
        due_date: str,
        pdf_content: bytes
    ) -> bool:
        """Envia orçamento/fatura com o PDF em anexo"""
        subject = f"{document_label} {number} - {sender_name}"

        html_content = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
        <h2 style="color: #1e3a5f;">Olá, {receiver_name}!</h2>

        <p>Segue em anexo {document_label.lower()} <strong>{number}</strong> referente a <strong>{title}</strong>.</p>

        <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">
            <tr>
                <td style="padding: 8px; border-bottom: 1px solid #e5e7eb;"><strong>Valor total</strong></td>
                <td style="padding: 8px; border-bottom: 1px solid #e5e7eb;">{total}</td>
            </tr>
            <tr>
                <td style="padding: 8px;"><strong>Vencimento</strong></td>
                <td style="padding: 8px;">{due_date}</td>
            </tr>
        </table>

        <p>Em caso de dúvidas, basta responder este email.</p>

        <p>Atenciosamente,<br>{sender_name}</p>
    </div>
</body>
</html>
"""

        text_content = f"""
Olá, {receiver_name}!

Segue em anexo {document_label.lower()} {number} referente a {title}.

Valor total: {total}
Vencimento: {due_date}

Atenciosamente,
{sender_name}
"""

        return self.send_email(
            to_email,
            subject,
            html_content,
            text_content,
            attachments=[(f"{number}.pdf", pdf_content)]
        )


# Instancia global do servico de email
email_service = EmailService()


def get_email_service() -> EmailService:
    """Dependency para injetar o serviço de email"""
    return email_service
