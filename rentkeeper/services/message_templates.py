from datetime import date
from typing import Optional, Sequence
from urllib.parse import quote

CURRENCY_SYMBOL = "₹"
SIGNATURE = "Applicancy Renters"


def format_amount(amount: float) -> str:
  if float(amount).is_integer():
    return f"{amount:,.0f}"
  return f"{amount:,.2f}"


def format_currency(amount: float) -> str:
  return f"{CURRENCY_SYMBOL}{format_amount(amount)}"


def recurring_rent_message(today: date) -> str:
  return f"Monthly rent for {today.strftime('%B %Y')}"


def reminder_message_template(tenant_name: Optional[str], amount: float, flat_name: Optional[str]) -> str:
  return (
    f"Dear {tenant_name or 'Tenant'}, your monthly rent of {format_currency(amount)} "
    f"for {flat_name or 'your flat'} is due. Please ensure timely payment."
  )


def rent_reminder_message(
  tenant_name: Optional[str],
  flat_name: Optional[str],
  amount: float,
  due_date: Optional[date],
  months: Optional[Sequence[str]] = None,
  payment_link: Optional[str] = None,
) -> str:
  due_text = due_date.strftime("%d %b %Y") if due_date else "N/A"
  if months:
    months_text = ", ".join(months)
    total = amount * len(months)
  else:
    months_text = due_date.strftime("%B %Y") if due_date else "this month"
    total = amount
  lines = [
    f"Dear {tenant_name or 'Tenant'},",
    "Greetings!",
    "",
    f"Upcoming payment of your monthly rent for {flat_name or 'your flat'} for {months_text} is due on *{due_text}*",
    "",
    f"Payment due is *Rs {format_amount(total)}*",
    "",
  ]
  if payment_link:
    lines += ["Please make the payment using the link below:", payment_link, ""]
  lines += ["Please pay the rent to avoid any missed payment.", "", "Thank you", f"*{SIGNATURE}*"]
  return "\n".join(lines)


def whatsapp_link(phone: str, message: str) -> str:
  digits = "".join((phone or "").split())
  if digits.startswith("+"):
    digits = digits[1:]
  return f"https://wa.me/{digits}?text={quote(message, safe='')}"
