import requests

from blog_migrator.migrators.shopify_client import REQUEST_TIMEOUT, ShopifyStore, shopify_headers


class PreFlightCheckError(Exception):
    """Custom exception for pre-flight check failures."""
    pass


def run_pre_flight_checks(config: dict, *, check_api: bool = True):
    """
    Verifies that both stores are configured and reachable before migrating.

    Args:
        config: The application configuration dictionary.
        check_api: Also call ``/shop.json`` on each store to validate the token.

    Raises:
        PreFlightCheckError: If any check fails.
    """
    print("[INFO] Running pre-flight checks...")

    for group in ("source", "target"):
        section = config.get(group, {})
        if not section.get("shop") or not section.get("token"):
            raise PreFlightCheckError(f"Missing config for {group.upper()} store (shop and token are required).")

    if not check_api:
        print("[INFO] Pre-flight checks passed (API token check skipped).")
        return

    for group in ("source", "target"):
        section = config[group]
        store = ShopifyStore(section["shop"], section["token"], section.get("api_version") or "2025-01")
        try:
            response = requests.get(f"{store.base_url}/shop.json", headers=shopify_headers(store), timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code in (401, 403):
                raise PreFlightCheckError(f"The {group} access token is invalid or lacks permissions.")
            raise PreFlightCheckError(f"Unexpected error checking the {group} store: {e}")
        except requests.RequestException as e:
            raise PreFlightCheckError(f"Network error connecting to the {group} store: {e}")

    print("[INFO] Pre-flight checks passed successfully.")
