"""Purchase URL templates for the supported retailers."""

from __future__ import annotations

from brick_deals.models.price import RetailerId
from brick_deals.validation import sanitize_set_number

RETAILER_URL_TEMPLATES: dict[RetailerId, str] = {
    RetailerId.LEGO: "https://www.lego.com/en-us/product/{set_number}",
    RetailerId.AMAZON: "https://www.amazon.com/s?k=LEGO+{set_number}",
    RetailerId.WALMART: "https://www.walmart.com/search?q=LEGO+{set_number}",
    RetailerId.TARGET: "https://www.target.com/s?searchTerm=LEGO+{set_number}",
    RetailerId.BEST_BUY: "https://www.bestbuy.com/site/searchpage.jsp?st=LEGO+{set_number}",
    RetailerId.KOHLS: "https://www.kohls.com/search.jsp?search=LEGO+{set_number}",
    RetailerId.GAMESTOP: "https://www.gamestop.com/search/?q=LEGO+{set_number}",
    RetailerId.SHOP_DISNEY: "https://www.shopdisney.com/search?q=LEGO+{set_number}",
    RetailerId.MACYS: "https://www.macys.com/shop/featured/lego+{set_number}",
    RetailerId.BARNES_NOBLE: "https://www.barnesandnoble.com/s/LEGO+{set_number}",
    RetailerId.SAMS_CLUB: "https://www.samsclub.com/s/LEGO+{set_number}",
    RetailerId.WALGREENS: "https://www.walgreens.com/search/results.jsp?Ntt=LEGO+{set_number}",
}


def retailer_url(retailer: str, set_number: str) -> str:
    """Return the purchase URL, or an empty string for unknown retailers."""

    try:
        template = RETAILER_URL_TEMPLATES[RetailerId(retailer)]
    except ValueError:
        return ""
    return template.format(set_number=sanitize_set_number(set_number))
