"""Main entry point for the Landed Cost Bot."""
import sys
import logging
from telegram.ext import Application, CommandHandler, CallbackQueryHandler
import config
from landedcost.handlers.worksheet import (
    cmd_start,
    cmd_help,
    cmd_dashboard,
    cmd_invoice_new,
    cmd_item,
    cmd_item_remove,
    cmd_invoice_save,
    cmd_invoice_cancel,
    cmd_invoice_edit,
    cmd_invoices,
    cmd_invoice_delete,
    cmd_freight,
    cmd_freights,
    cmd_freight_delete,
    cmd_landed,
    cmd_worksheet,
    cmd_worksheet_clear,
    cmd_export,
    handle_export_callback,
)

logger = logging.getLogger(__name__)

COMMANDS = {
    "start": cmd_start,
    "help": cmd_help,
    "dashboard": cmd_dashboard,
    "invoice_new": cmd_invoice_new,
    "item": cmd_item,
    "item_remove": cmd_item_remove,
    "invoice_save": cmd_invoice_save,
    "invoice_cancel": cmd_invoice_cancel,
    "invoice_edit": cmd_invoice_edit,
    "invoices": cmd_invoices,
    "invoice_delete": cmd_invoice_delete,
    "freight": cmd_freight,
    "freights": cmd_freights,
    "freight_delete": cmd_freight_delete,
    "landed": cmd_landed,
    "worksheet": cmd_worksheet,
    "worksheet_clear": cmd_worksheet_clear,
    "export": cmd_export,
}


def configure_logging():
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    # Suppress httpx request logging (it includes the bot token in URLs)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_application(token: str) -> Application:
    application = Application.builder().token(token).build()

    for name, handler in COMMANDS.items():
        application.add_handler(CommandHandler(name, handler))

    # Inline keyboard callback handler (export format selection)
    application.add_handler(CallbackQueryHandler(handle_export_callback, pattern=r"^lc_export:"))
    return application


def main():
    """Start the bot."""
    configure_logging()

    if not config.TELEGRAM_BOT_TOKEN:
        logger.error("TELEGRAM_BOT_TOKEN not set. Please check your .env file.")
        return

    logger.info("Starting Landed Cost Bot...")
    application = build_application(config.TELEGRAM_BOT_TOKEN)

    logger.info("Bot is ready! Starting polling...")
    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
