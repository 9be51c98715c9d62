"""
MJML Email Templates
Layouts for notification and subscription emails
"""

from typing import Optional

from .config import FRONTEND_URL

# App theme colors - Navy/Gold legal palette
THEME = {
    "primary": "#1e3a8a",
    "primary_dark": "#172554",
    "accent": "#b45309",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#15803d",
    "warning": "#f59e0b",
    "danger": "#ef4444",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    footer_name: str = "JURIS",
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['primary']}" padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="22px" font-weight="700" color="#ffffff" padding="0">
              ⚖️ {footer_name}
            </mj-text>
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="32px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              {footer_name} - Gestion de cabinet juridique
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def notification_email_template(title: str, body_html: str, firm_name: Optional[str] = None) -> str:
    """Wrap a rendered notification body in the base layout"""
    content = f"""
    <mj-text>
      {body_html}
    </mj-text>
    """
    return get_base_template(
        title=title,
        preview_text=title,
        content_sections=content,
        footer_name=firm_name or "JURIS",
    )


def subscription_payment_reminder_template(
    firm_name: str, reference: str, amount: str, days_overdue: int
) -> str:
    """Subscription payment reminder MJML template"""
    content = f"""
    <mj-text>
      Bonjour {firm_name},
    </mj-text>

    <mj-text background-color="#fff3cd" color="#856404" padding="16px">
      <strong>⚠️ Paiement en retard :</strong> {days_overdue} jour(s)
    </mj-text>

    <mj-table padding="16px 0">
      <tr>
        <td style="padding: 8px 0; color: {THEME['text_muted']};">Référence :</td>
        <td style="padding: 8px 0; font-weight: 600;">{reference}</td>
      </tr>
      <tr>
        <td style="padding: 8px 0; color: {THEME['text_muted']};">Montant :</td>
        <td style="padding: 8px 0; font-weight: 600;">{amount} FCFA</td>
      </tr>
    </mj-table>

    <mj-text>
      Merci de procéder au règlement de votre abonnement afin de conserver l'accès à votre espace.
    </mj-text>
    """

    return get_base_template(
        title="💰 Rappel de paiement",
        preview_text=f"Votre abonnement est en retard de {days_overdue} jour(s)",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/subscription",
        cta_label="Renouveler mon abonnement",
    )
