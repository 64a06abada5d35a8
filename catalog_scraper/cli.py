from __future__ import annotations

import argparse
import sys
from typing import Dict, List, Optional

from .cart import Cart
from .config import DEFAULT_CONFIG_DIR, DEFAULT_CONFIG_PATH, Settings, dig, load_config, selectors_from_config
from .crawler import Crawler, ProductPageProcessor
from .extract import FieldExtractor
from .fetch import PageFetcher, create_session
from .logs import LoggingContext, init_logging
from .types import ConfigError, SelectorConfig


MESSAGES = {
    "en": {
        "stage_links": "[1/3] Fetching start page and collecting links…",
        "stage_demo": "[1/3] Generating {count} demo items…",
        "found_items": "Collected products: {count}",
        "no_items": "No products collected: {reason}",
        "stage_save": "[2/3] Saving: {formats}…",
        "saved": "  {fmt}: {count} file(s)",
        "stage_done": "[3/3] Finalizing",
        "success": "Scraping completed. Saved products: {count}",
        "config_error": "Configuration error: {error}",
        "error": "Scraping error: {error}",
        "interrupted": "Interrupted by user",
        "help_desc": (
            "Collect products from a catalog page using CSS selectors and export\n"
            "them as text, JSON, CSV, YAML and Excel files grouped by category."
        ),
        "help_config": "Path to the default YAML config",
        "help_config_dir": "Directory with additional YAML configs",
        "help_out": "Output directory for per-item files",
        "help_formats": "Export formats (text, json, csv, yaml, excel, products)",
        "help_limit": "Maximum number of product links to visit",
        "help_workers": "Number of parallel workers for product pages",
        "help_demo": "Export N generated demo items instead of crawling",
        "help_delay": "Delay between requests (sec)",
        "help_ua": "Override User-Agent",
        "help_retries": "Retry count for HTTP errors",
        "help_lang": "Messages language: en or uk (default en)",
    },
    "uk": {
        "stage_links": "[1/3] Завантаження стартової сторінки та збір посилань…",
        "stage_demo": "[1/3] Генерація {count} демо-товарів…",
        "found_items": "Зібрано товарів: {count}",
        "no_items": "Товари не зібрано: {reason}",
        "stage_save": "[2/3] Збереження: {formats}…",
        "saved": "  {fmt}: файлів {count}",
        "stage_done": "[3/3] Завершення",
        "success": "Парсинг успішно завершено. Збережено товарів: {count}",
        "config_error": "Помилка конфігурації: {error}",
        "error": "Помилка парсингу: {error}",
        "interrupted": "Перервано користувачем",
        "help_desc": (
            "Збір товарів зі сторінки каталогу за CSS-селекторами та експорт\n"
            "у текст, JSON, CSV, YAML і Excel з групуванням за категоріями."
        ),
        "help_config": "Шлях до основного YAML-конфігу",
        "help_config_dir": "Каталог з додатковими YAML-конфігами",
        "help_out": "Каталог для файлів товарів",
        "help_formats": "Формати експорту (text, json, csv, yaml, excel, products)",
        "help_limit": "Максимальна кількість посилань на товари",
        "help_workers": "Кількість паралельних обробників сторінок",
        "help_demo": "Експортувати N згенерованих товарів замість парсингу",
        "help_delay": "Затримка між запитами (сек)",
        "help_ua": "Перевизначити User-Agent",
        "help_retries": "Кількість повторів при помилках HTTP",
        "help_lang": "Мова повідомлень: en або uk (за замовчуванням en)",
    },
}

FORMATS = ("text", "json", "csv", "yaml", "excel", "products")


def _msg(lang: str, key: str, **kwargs) -> str:
    lang_key = lang if lang in MESSAGES else "en"
    template = MESSAGES[lang_key].get(key, "")
    return template.format(**kwargs)


def build_crawler(
    selectors: SelectorConfig,
    settings: Settings,
    log: LoggingContext,
    user_agent: Optional[str] = None,
    retries: int = 0,
    delay: float = 0.0,
) -> Crawler:
    fetcher = PageFetcher(
        session=create_session(user_agent=user_agent, total_retries=retries),
        log=log,
        pause_seconds=delay,
    )
    processor = ProductPageProcessor(fetcher, FieldExtractor(selectors), log=log, media_dir=settings.media_dir)
    return Crawler(fetcher, processor, log=log)


def export_cart(cart: Cart, settings: Settings, formats: List[str], lang: str = "en") -> Dict[str, int]:
    """Write the enabled formats and return the number of files per format."""
    print(_msg(lang, "stage_save", formats=", ".join(formats) or "-"), flush=True)
    counts: Dict[str, int] = {}
    per_item = [fmt for fmt in formats if fmt not in ("excel", "products")]
    for fmt, paths in cart.export(settings.output_dir, per_item).items():
        counts[fmt] = len(paths)
    if "excel" in formats:
        counts["excel"] = 1 if cart.export_as_excel(settings.excel_path) else 0
    if "products" in formats:
        counts["products"] = len(cart.export_as_product_files(settings.yaml_dir))
    for fmt, count in counts.items():
        print(_msg(lang, "saved", fmt=fmt, count=count), flush=True)
    return counts


def scrape_to_files(
    selectors: SelectorConfig,
    settings: Settings,
    log: LoggingContext,
    formats: Optional[List[str]] = None,
    user_agent: Optional[str] = None,
    retries: int = 0,
    delay: float = 0.0,
    lang: str = "en",
) -> Cart:
    """High-level convenience function: crawl the start page and export every valid product.

    Returns the cart with the collected items; an empty cart is a valid outcome.
    """
    print(_msg(lang, "stage_links"), flush=True)
    crawler = build_crawler(selectors, settings, log, user_agent=user_agent, retries=retries, delay=delay)
    items = crawler.crawl(selectors.start_page, limit=settings.limit, workers=settings.workers)

    cart = Cart(log=log, items=items)
    if cart.is_empty():
        reason = crawler.last_report.reason if crawler.last_report else None
        print(_msg(lang, "no_items", reason=reason or "-"), flush=True)
        return cart

    print(_msg(lang, "found_items", count=len(cart)), flush=True)
    export_cart(cart, settings, formats if formats is not None else _enabled_formats(settings), lang=lang)
    print(_msg(lang, "stage_done"), flush=True)
    return cart


def _enabled_formats(settings: Settings) -> List[str]:
    formats = settings.formats()
    if settings.run_save_to_excel:
        formats.append("excel")
    if settings.run_save_product_files:
        formats.append("products")
    return formats


def _build_arg_parser(lang: str = "en") -> argparse.ArgumentParser:
    loc = MESSAGES.get(lang, MESSAGES["en"])
    p = argparse.ArgumentParser(
        prog="catalog-scraper",
        description=loc["help_desc"],
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "-c",
        "--config",
        dest="config_path",
        default=str(DEFAULT_CONFIG_PATH),
        help=loc["help_config"],
    )
    p.add_argument(
        "--config-dir",
        dest="config_dir",
        default=str(DEFAULT_CONFIG_DIR),
        help=loc["help_config_dir"],
    )
    p.add_argument(
        "-o",
        "--out",
        dest="output_dir",
        default=None,
        help=loc["help_out"],
    )
    p.add_argument(
        "-f",
        "--formats",
        dest="formats",
        nargs="+",
        choices=FORMATS,
        default=None,
        help=loc["help_formats"],
    )
    p.add_argument(
        "-l",
        "--limit",
        dest="limit",
        type=int,
        default=None,
        help=loc["help_limit"],
    )
    p.add_argument(
        "-w",
        "--workers",
        dest="workers",
        type=int,
        default=None,
        help=loc["help_workers"],
    )
    p.add_argument(
        "--demo",
        dest="demo",
        type=int,
        default=None,
        metavar="N",
        help=loc["help_demo"],
    )
    p.add_argument(
        "-d",
        "--delay",
        dest="delay",
        type=float,
        default=0.0,
        help=loc["help_delay"],
    )
    p.add_argument(
        "-H",
        "--user-agent",
        dest="user_agent",
        default=None,
        help=loc["help_ua"],
    )
    p.add_argument(
        "-r",
        "--retries",
        dest="retries",
        type=int,
        default=0,
        help=loc["help_retries"],
    )
    p.add_argument(
        "--lang",
        dest="lang",
        choices=["en", "uk"],
        default=lang,
        help=loc["help_lang"],
    )
    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_arg_parser("en")
    args = parser.parse_args(argv)
    lang = args.lang
    log: Optional[LoggingContext] = None
    try:
        config = load_config(args.config_path, args.config_dir)
        log = init_logging(dig(config, "logging", default={}))
        settings = Settings.from_config(
            config,
            {"output_dir": args.output_dir, "limit": args.limit, "workers": args.workers},
        )
        log.app.info("Application started")

        if args.demo is not None:
            print(_msg(lang, "stage_demo", count=args.demo), flush=True)
            cart = Cart.from_fake(args.demo, log=log)
            export_cart(cart, settings, args.formats or _enabled_formats(settings), lang=lang)
        elif not settings.run_website_parser:
            log.app.info("Website parser is disabled by the configuration")
            cart = Cart(log=log)
        else:
            selectors = selectors_from_config(config)
            cart = scrape_to_files(
                selectors,
                settings,
                log,
                formats=args.formats,
                user_agent=args.user_agent,
                retries=args.retries,
                delay=args.delay,
                lang=lang,
            )
        print(_msg(lang, "success", count=len(cart)))
        log.app.info("All actions completed: %d items", len(cart))
        return 0
    except ConfigError as exc:
        if log is not None:
            log.error.error("Configuration error: %s", exc)
        print(_msg(lang, "config_error", error=exc), file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print(_msg(lang, "interrupted"), file=sys.stderr)
        return 130
    except Exception as exc:
        if log is not None:
            log.error.exception("Unexpected error")
        print(_msg(lang, "error", error=exc), file=sys.stderr)
        return 1
    finally:
        if log is not None:
            log.close()
