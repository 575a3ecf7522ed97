# sdk/productclient.py
import requests
import httpx
from typing import Any, Dict, Optional
from rich import print


class ProductApiError(Exception):
    """Non-2xx answer from the product API, decoded from its {error, message} body."""

    def __init__(self, status_code: int, error: str, message: str = ""):
        super().__init__(f"{status_code} {error}: {message}" if message else f"{status_code} {error}")
        self.status_code = status_code
        self.error = error
        self.message = message


def _raise_for_error(r) -> None:
    if r.status_code < 400:
        return
    try:
        body = r.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    raise ProductApiError(r.status_code, body.get("error", f"HTTP {r.status_code}"), body.get("message", ""))


class ProductClient:
    """
    Thin wrapper over the product API.
    `session` may be any requests-compatible client (a FastAPI TestClient works too).
    """

    def __init__(self, base_url: str = "http://localhost:3000", api_key: Optional[str] = None,
                 timeout: Optional[float] = 10, session: Any = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        if api_key:
            self.session.headers.update({"x-api-key": api_key})

    def _request(self, method: str, path: str, **kwargs):
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        r = self.session.request(method, f"{self.base_url}{path}", **kwargs)
        _raise_for_error(r)
        return r

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None):
        return self._request("GET", path, params=params)

    def greet(self) -> str:
        return self._get("/").text

    def list_products(self, category: Optional[str] = None, page: Optional[int] = None, limit: Optional[int] = None):
        params = {}
        if category:
            params["category"] = category
        if page is not None:
            params["page"] = page
        if limit is not None:
            params["limit"] = limit
        return self._get("/api/products", params=params).json()

    def search_products(self, name: str):
        return self._get("/api/products/search", params={"name": name}).json()

    def stats(self):
        return self._get("/api/products/stats").json()

    def get_product(self, product_id: str):
        return self._get(f"/api/products/{product_id}").json()

    def create_product(self, name: str, price: float, category: Optional[str] = None,
                       description: Optional[str] = None, in_stock: Optional[bool] = None, **extra):
        payload: Dict[str, Any] = {"name": name, "price": price}
        if category is not None:
            payload["category"] = category
        if description is not None:
            payload["description"] = description
        if in_stock is not None:
            payload["inStock"] = in_stock
        payload.update(extra)
        return self._request("POST", "/api/products", json=payload).json()

    def update_product(self, product_id: str, **fields):
        # PUT is validated like create: name and price must be sent every time
        return self._request("PUT", f"/api/products/{product_id}", json=fields).json()

    def delete_product(self, product_id: str):
        return self._request("DELETE", f"/api/products/{product_id}").json()

    # Async fetch (example)
    async def get_product_async(self, product_id: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        headers = {"x-api-key": self.api_key} if self.api_key else {}
        async with httpx.AsyncClient(timeout=self.timeout, headers=headers, transport=transport) as client:
            r = await client.get(f"{self.base_url}/api/products/{product_id}")
            _raise_for_error(r)
            return r.json()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Product API client")
    parser.add_argument("--base-url", default="http://127.0.0.1:3000")
    parser.add_argument("--api-key", default=None)
    subparsers = parser.add_subparsers(dest="command", required=True)

    lp = subparsers.add_parser("list", help="List products")
    lp.add_argument("--category", help="Filter by category")
    lp.add_argument("--page", type=int)
    lp.add_argument("--limit", type=int)

    sp = subparsers.add_parser("search", help="Search products by name")
    sp.add_argument("--name", required=True)

    subparsers.add_parser("stats", help="Counts per category")

    gp = subparsers.add_parser("get", help="Get a product by id")
    gp.add_argument("--id", required=True)

    cp = subparsers.add_parser("create", help="Create a product")
    cp.add_argument("--name", required=True)
    cp.add_argument("--price", type=float, required=True)
    cp.add_argument("--category")
    cp.add_argument("--description")
    cp.add_argument("--in-stock", action="store_true", default=None)

    dp = subparsers.add_parser("delete", help="Delete a product")
    dp.add_argument("--id", required=True)

    args = parser.parse_args()
    c = ProductClient(base_url=args.base_url, api_key=args.api_key)

    try:
        if args.command == "list":
            print(c.list_products(args.category, args.page, args.limit))
        elif args.command == "search":
            print(c.search_products(args.name))
        elif args.command == "stats":
            print(c.stats())
        elif args.command == "get":
            print(c.get_product(args.id))
        elif args.command == "create":
            print(c.create_product(args.name, args.price, args.category, args.description, args.in_stock))
        elif args.command == "delete":
            print(c.delete_product(args.id))
    except ProductApiError as e:
        print(f"[red]{e}[/red]")
        raise SystemExit(1)
