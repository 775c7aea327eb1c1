"""
Grocery POS Dashboard - the register's screen.

Talks to the register API over HTTP: sign-in, the POS tab (catalog, cart,
cash checkout and receipt, product add/edit/delete), the analytics tab and
admin approvals.
"""
import base64
import logging
from datetime import datetime

import dash
import dash_bootstrap_components as dbc
import pandas as pd
import plotly.express as px
import requests
from dash import ALL, Input, Output, State, dcc, html
from dash.exceptions import PreventUpdate

from grocerypos.core.config import settings
from grocerypos.core.formatting import format_currency
from grocerypos.services.catalog_service import CATEGORIES

logger = logging.getLogger(__name__)

# Initialize Dash app
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.BOOTSTRAP],
    title=settings.store_name,
    update_title=f"{settings.store_name} - Loading...",
    suppress_callback_exceptions=True,
)

# API base URL
API_BASE_URL = f"{settings.api_base_url.rstrip('/')}{settings.api_v1_str}"

SIGNED_OUT = {"is_authenticated": False, "is_admin": False, "profile": None}


def api_request(method: str, endpoint: str, **kwargs) -> tuple:
    """Call the register API; returns (status code, JSON body). Status 0 means unreachable."""
    try:
        response = requests.request(method, f"{API_BASE_URL}/{endpoint}", timeout=10, **kwargs)
    except requests.RequestException as e:
        logger.error(f"Error calling {endpoint}: {e}")
        return 0, {"detail": "The register service is unreachable"}
    try:
        body = response.json()
    except ValueError:
        body = {"text": response.text}
    return response.status_code, body


def error_message(body: dict, default: str) -> str:
    return body.get("message") or body.get("detail") or default


# Layout pieces

def login_section():
    return dbc.Row(
        dbc.Col(
            dbc.Card([
                dbc.CardHeader(html.H4(settings.store_name, className="mb-0")),
                dbc.CardBody([
                    dbc.Input(id="full-name-input", placeholder="Full name (sign up only)", className="mb-2"),
                    dbc.Input(id="email-input", type="email", placeholder="Email", className="mb-2"),
                    dbc.Input(id="password-input", type="password", placeholder="Password", className="mb-3"),
                    dbc.Button("Sign In", id="sign-in-button", color="primary", className="me-2"),
                    dbc.Button("Sign Up", id="sign-up-button", color="secondary", outline=True),
                    html.Div(id="auth-message", className="mt-3"),
                ]),
            ]),
            width={"size": 4, "offset": 4},
        ),
        className="mt-5",
    )


def pos_tab():
    return dbc.Row([
        # Catalog
        dbc.Col([
            dbc.Row([
                dbc.Col(dbc.Input(id="search-input", placeholder="Search products...", debounce=True), width=6),
                dbc.Col(dcc.Dropdown(id="category-filter", value="All", clearable=False), width=3),
                dbc.Col(dbc.Button("Add Product", id="add-product-button", color="primary"), width=3,
                        className="text-end"),
            ], className="mb-3"),
            html.Div(id="product-grid"),
        ], width=8),

        # Cart
        dbc.Col([
            dbc.Card([
                dbc.CardHeader("Cart"),
                dbc.CardBody([
                    html.Div(id="cart-lines"),
                    html.Hr(),
                    html.H4(id="cart-total", children=format_currency(0)),
                    dbc.Button("Checkout", id="checkout-button", color="success", className="me-2"),
                    dbc.Button("Clear", id="clear-cart-button", color="danger", outline=True),
                ]),
            ], className="mb-3"),
            dbc.Card([
                dbc.CardHeader("Recent Transactions"),
                dbc.CardBody(html.Div(id="recent-transactions")),
            ]),
        ], width=4),

        # Checkout dialog
        dbc.Modal([
            dbc.ModalHeader(dbc.ModalTitle("Cash Payment")),
            dbc.ModalBody([
                html.H5(id="checkout-total"),
                dbc.Input(id="cash-input", placeholder="Cash received", type="text", className="mb-2"),
                html.Div(id="change-display", className="mb-2"),
                html.Div(id="checkout-message"),
                html.Pre(id="receipt-view", className="mt-3"),
            ]),
            dbc.ModalFooter([
                dbc.Button("Complete Payment", id="complete-button", color="success", disabled=True),
                dbc.Button("Close", id="close-checkout-button", color="secondary"),
            ]),
        ], id="checkout-modal", is_open=False),

        product_form_modal(),
        delete_product_modal(),
    ])


def product_form_modal():
    return dbc.Modal([
        dbc.ModalHeader(dbc.ModalTitle(id="product-form-title", children="Add Product")),
        dbc.ModalBody([
            dbc.Input(id="product-name-input", placeholder="Product name", className="mb-2"),
            dbc.Input(id="product-price-input", placeholder="Price", type="text", className="mb-2"),
            dcc.Dropdown(
                id="product-category-input",
                options=[{"label": c, "value": c} for c in CATEGORIES],
                placeholder="Category",
                className="mb-2",
            ),
            dbc.Input(id="product-stock-input", placeholder="Stock", type="text", className="mb-2"),
            dcc.Upload(
                id="product-image-upload",
                children=html.Div(["Drag and drop or ", html.A("select an image")]),
                accept="image/*",
                style={"borderWidth": "1px", "borderStyle": "dashed", "borderRadius": "5px",
                       "textAlign": "center", "padding": "10px"},
                className="mb-2",
            ),
            html.Small(id="product-image-name", className="text-muted d-block mb-2"),
            html.Div(id="product-form-message"),
        ]),
        dbc.ModalFooter([
            dbc.Button("Save", id="save-product-button", color="primary"),
            dbc.Button("Cancel", id="cancel-product-button", color="secondary"),
        ]),
    ], id="product-modal", is_open=False)


def delete_product_modal():
    return dbc.Modal([
        dbc.ModalHeader(dbc.ModalTitle("Delete Product")),
        dbc.ModalBody(id="delete-product-body"),
        dbc.ModalFooter([
            dbc.Button("Delete", id="confirm-delete-button", color="danger"),
            dbc.Button("Cancel", id="cancel-delete-button", color="secondary"),
        ]),
    ], id="delete-modal", is_open=False)


def analytics_tab():
    return html.Div([
        dbc.RadioItems(
            id="time-frame",
            options=[
                {"label": "Today", "value": "today"},
                {"label": "This Week", "value": "week"},
                {"label": "This Month", "value": "month"},
                {"label": "All Time", "value": "all"},
            ],
            value="today",
            inline=True,
            className="mb-3",
        ),
        dbc.Row([
            dbc.Col(metric_card("Total Sales", "total-sales"), width=4),
            dbc.Col(metric_card("Transactions", "total-transactions"), width=4),
            dbc.Col(metric_card("Average Sale", "average-sale"), width=4),
        ], className="mb-4"),
        dbc.Row([
            dbc.Col(dbc.Card([dbc.CardHeader("Sales by Category"), dbc.CardBody(dcc.Graph(id="category-chart"))]), width=6),
            dbc.Col(dbc.Card([dbc.CardHeader("Sales by Date"), dbc.CardBody(dcc.Graph(id="date-chart"))]), width=6),
        ], className="mb-4"),
        dbc.Card([dbc.CardHeader("Sales by Cashier"), dbc.CardBody(html.Div(id="cashier-table"))]),
    ])


def metric_card(title: str, value_id: str):
    return dbc.Card(dbc.CardBody([
        html.H6(title, className="card-title"),
        html.H3(id=value_id, children="0", className="text-primary"),
    ]))


def admin_tab():
    return html.Div([
        dbc.Button("Refresh", id="refresh-pending-button", color="secondary", outline=True, className="mb-3"),
        html.Div(id="pending-profiles"),
    ])


# Dashboard layout
app.layout = dbc.Container([
    dcc.Store(id="session-store", data=SIGNED_OUT),
    dcc.Store(id="cart-store"),
    dcc.Store(id="product-edit-id"),
    dcc.Store(id="product-delete-id"),
    dcc.Store(id="product-saved", data=0),
    dcc.Store(id="product-deleted", data=0),
    dcc.Interval(id="session-interval", interval=15 * 1000, n_intervals=0),
    dcc.Interval(id="notification-interval", interval=3 * 1000, n_intervals=0),

    dbc.Row([
        dbc.Col(html.H2(settings.store_name), width=8),
        dbc.Col([
            html.Span(id="signed-in-as", className="me-3"),
            dbc.Button("Sign Out", id="sign-out-button", color="link", size="sm"),
        ], width=4, className="text-end"),
    ], className="mt-3 mb-2"),
    html.Div(id="notifications"),

    html.Div(login_section(), id="login-section"),
    html.Div(
        dbc.Tabs([
            dbc.Tab(pos_tab(), label="Point of Sale", tab_id="pos"),
            dbc.Tab(analytics_tab(), label="Analytics", tab_id="analytics"),
            dbc.Tab(admin_tab(), label="Admin", tab_id="admin", id="admin-tab"),
        ], id="tabs", active_tab="pos"),
        id="app-section",
        style={"display": "none"},
    ),
], fluid=True)


# Callbacks

@app.callback(
    [Output("session-store", "data"), Output("auth-message", "children")],
    [Input("sign-in-button", "n_clicks"),
     Input("sign-up-button", "n_clicks"),
     Input("sign-out-button", "n_clicks"),
     Input("session-interval", "n_intervals")],
    [State("email-input", "value"),
     State("password-input", "value"),
     State("full-name-input", "value")],
)
def update_session(sign_in_clicks, sign_up_clicks, sign_out_clicks, n, email, password, full_name):
    """Sign in, sign up, sign out, or reconcile the session with the register."""
    trigger = dash.ctx.triggered_id
    credentials = {"email": email or "", "password": password or ""}

    if trigger == "sign-in-button":
        status, body = api_request("POST", "auth/sign-in", json=credentials)
        if status != 200:
            return SIGNED_OUT, dbc.Alert(error_message(body, "Sign in failed"), color="danger")
        return body, None

    if trigger == "sign-up-button":
        status, body = api_request("POST", "auth/sign-up", json={**credentials, "full_name": full_name or ""})
        if status != 200:
            return SIGNED_OUT, dbc.Alert(error_message(body, "Sign up failed"), color="danger")
        return SIGNED_OUT, dbc.Alert(body.get("message") or "Account created", color="info")

    if trigger == "sign-out-button":
        api_request("POST", "auth/sign-out")
        return SIGNED_OUT, None

    # Poll path: signs this screen out if another device took over the account
    status, body = api_request("POST", "auth/refresh")
    if status != 200:
        return dash.no_update, dash.no_update
    return body, dash.no_update


@app.callback(
    [Output("login-section", "style"),
     Output("app-section", "style"),
     Output("admin-tab", "disabled"),
     Output("signed-in-as", "children")],
    [Input("session-store", "data")],
)
def toggle_sections(session):
    session = session or SIGNED_OUT
    if not session.get("is_authenticated"):
        return {}, {"display": "none"}, True, ""
    profile = session.get("profile") or {}
    return {"display": "none"}, {}, not session.get("is_admin"), f"{profile.get('full_name')} ({profile.get('role')})"


@app.callback(
    Output("notifications", "children"),
    [Input("notification-interval", "n_intervals")],
)
def show_notifications(n):
    status, body = api_request("GET", "notifications")
    if status != 200 or not body.get("notifications"):
        return dash.no_update
    return [
        dbc.Alert(
            [html.Strong(item["title"]), html.Span(f" {item['description']}")],
            color="danger" if item["variant"] == "destructive" else "success",
            dismissable=True,
            duration=5000,
        )
        for item in body["notifications"]
    ]


@app.callback(
    [Output("product-grid", "children"), Output("category-filter", "options")],
    [Input("search-input", "value"),
     Input("category-filter", "value"),
     Input("session-store", "data"),
     Input("cart-store", "data"),
     Input("product-saved", "data"),
     Input("product-deleted", "data")],
)
def update_product_grid(search, category, session, cart, saved, deleted):
    if not (session or {}).get("is_authenticated"):
        return [], []

    status, body = api_request("GET", "products", params={"search": search or "", "category": category or "All"})
    _, categories = api_request("GET", "products/categories")
    options = [{"label": c, "value": c} for c in categories.get("filters", ["All"])]
    if status != 200:
        return html.P(error_message(body, "Failed to load products")), options

    products = body.get("products", [])
    if not products:
        return html.P("No products found"), options

    cards = [
        dbc.Col(
            dbc.Card([
                dbc.CardImg(src=product["image"], top=True, style={"height": "120px", "objectFit": "cover"})
                if product.get("image") else None,
                dbc.CardBody([
                    html.H6(product["name"], className="card-title"),
                    dbc.Badge(product["category"], color="light", text_color="dark", className="mb-2"),
                    html.P(format_currency(product["price"]), className="mb-1"),
                    html.Small(f"Stock: {product['stock']}", className="text-muted d-block mb-2"),
                    dbc.Button(
                        "In Cart" if product["in_cart"] else "Add",
                        id={"type": "add-to-cart", "index": product["id"]},
                        size="sm",
                        color="secondary" if product["in_cart"] else "primary",
                        className="me-1",
                    ),
                    dbc.Button("Edit", id={"type": "edit-product", "index": product["id"]},
                               size="sm", color="secondary", outline=True, className="me-1"),
                    dbc.Button("Delete", id={"type": "delete-product", "index": product["id"]},
                               size="sm", color="danger", outline=True),
                ]),
            ], className="mb-3"),
            width=3,
        )
        for product in products
    ]
    return dbc.Row(cards), options


def find_product(product_id: str):
    status, body = api_request("GET", "products")
    if status != 200:
        return None
    return next((p for p in body.get("products", []) if p["id"] == product_id), None)


def decode_upload(contents: str, filename: str) -> tuple:
    """Turn a dcc.Upload data URL into a (filename, bytes, content type) file tuple."""
    header, data = contents.split(",", 1)
    content_type = header[len("data:"):].split(";")[0]
    return filename, base64.b64decode(data), content_type


@app.callback(
    [Output("product-modal", "is_open"),
     Output("product-form-title", "children"),
     Output("product-edit-id", "data"),
     Output("product-name-input", "value"),
     Output("product-price-input", "value"),
     Output("product-category-input", "value"),
     Output("product-stock-input", "value"),
     Output("product-image-upload", "contents"),
     Output("product-form-message", "children"),
     Output("product-saved", "data")],
    [Input("add-product-button", "n_clicks"),
     Input({"type": "edit-product", "index": ALL}, "n_clicks"),
     Input("cancel-product-button", "n_clicks"),
     Input("save-product-button", "n_clicks")],
    [State("product-edit-id", "data"),
     State("product-name-input", "value"),
     State("product-price-input", "value"),
     State("product-category-input", "value"),
     State("product-stock-input", "value"),
     State("product-image-upload", "contents"),
     State("product-image-upload", "filename"),
     State("product-saved", "data")],
    prevent_initial_call=True,
)
def manage_product_form(add_clicks, edit_clicks, cancel_clicks, save_clicks,
                        product_id, name, price, category, stock, image_contents, image_name, saved):
    """Open the add/edit form, or submit it to the register API."""
    trigger = dash.ctx.triggered_id
    if not dash.ctx.triggered or not dash.ctx.triggered[0]["value"]:
        raise PreventUpdate
    keep = dash.no_update

    if trigger == "add-product-button":
        return True, "Add Product", None, "", "", None, "", None, None, keep

    if isinstance(trigger, dict) and trigger["type"] == "edit-product":
        product = find_product(trigger["index"])
        if product is None:
            raise PreventUpdate
        return (True, "Edit Product", product["id"], product["name"], str(product["price"]),
                product["category"], str(product["stock"]), None, None, keep)

    if trigger == "cancel-product-button":
        return False, keep, None, keep, keep, keep, keep, None, None, keep

    form = {"name": name or "", "price": price or "", "category": category or "", "stock": stock or ""}
    files = {"image": decode_upload(image_contents, image_name or "image")} if image_contents else None
    if product_id:
        status, body = api_request("PUT", f"products/{product_id}", data=form, files=files)
    else:
        status, body = api_request("POST", "products", data=form, files=files)

    if status not in (200, 201):
        message = dbc.Alert(error_message(body, "Failed to save product"), color="danger")
        return keep, keep, keep, keep, keep, keep, keep, keep, message, keep
    return False, keep, None, keep, keep, keep, keep, None, None, (saved or 0) + 1


@app.callback(
    Output("product-image-name", "children"),
    [Input("product-image-upload", "filename"), Input("product-image-upload", "contents")],
)
def show_image_name(filename, contents):
    return f"Selected: {filename}" if contents and filename else None


@app.callback(
    [Output("delete-modal", "is_open"),
     Output("delete-product-body", "children"),
     Output("product-delete-id", "data"),
     Output("product-deleted", "data")],
    [Input({"type": "delete-product", "index": ALL}, "n_clicks"),
     Input("cancel-delete-button", "n_clicks"),
     Input("confirm-delete-button", "n_clicks")],
    [State("product-delete-id", "data"), State("product-deleted", "data")],
    prevent_initial_call=True,
)
def manage_product_delete(delete_clicks, cancel_clicks, confirm_clicks, product_id, deleted):
    """Confirm, then soft-delete a product."""
    trigger = dash.ctx.triggered_id
    if not dash.ctx.triggered or not dash.ctx.triggered[0]["value"]:
        raise PreventUpdate

    if isinstance(trigger, dict):
        product = find_product(trigger["index"])
        if product is None:
            raise PreventUpdate
        prompt = f"Are you sure you want to delete {product['name']}? This cannot be undone."
        return True, prompt, product["id"], dash.no_update

    if trigger == "cancel-delete-button" or not product_id:
        return False, dash.no_update, None, dash.no_update

    status, body = api_request("DELETE", f"products/{product_id}")
    if status != 200:
        message = dbc.Alert(error_message(body, "Failed to delete product"), color="danger")
        return True, message, product_id, dash.no_update
    return False, None, None, (deleted or 0) + 1


@app.callback(
    [Output("cart-store", "data"),
     Output("receipt-view", "children"),
     Output("checkout-message", "children")],
    [Input({"type": "add-to-cart", "index": ALL}, "n_clicks"),
     Input({"type": "remove-from-cart", "index": ALL}, "n_clicks"),
     Input({"type": "cart-quantity", "index": ALL}, "value"),
     Input("clear-cart-button", "n_clicks"),
     Input("checkout-button", "n_clicks"),
     Input("close-checkout-button", "n_clicks"),
     Input("complete-button", "n_clicks"),
     Input("session-store", "data")],
    [State("cash-input", "value")],
    prevent_initial_call=True,
)
def update_cart(add_clicks, remove_clicks, quantities, clear_clicks, checkout_clicks,
                close_clicks, complete_clicks, session, cash_received):
    """Every cart and checkout action goes through the register API."""
    if not (session or {}).get("is_authenticated"):
        return None, None, None

    trigger = dash.ctx.triggered_id
    triggered_value = dash.ctx.triggered[0]["value"] if dash.ctx.triggered else None
    receipt, message = dash.no_update, None

    if isinstance(trigger, dict) and triggered_value:
        if trigger["type"] == "add-to-cart":
            api_request("POST", "cart/items", json={"product_id": trigger["index"]})
        elif trigger["type"] == "remove-from-cart":
            api_request("DELETE", f"cart/items/{trigger['index']}")
        elif trigger["type"] == "cart-quantity":
            api_request("PUT", f"cart/items/{trigger['index']}", json={"quantity": int(triggered_value)})
    elif trigger == "clear-cart-button":
        api_request("DELETE", "cart")
    elif trigger == "checkout-button":
        status, body = api_request("POST", "cart/checkout/open")
        if status != 200:
            message = dbc.Alert(error_message(body, "Cart is empty"), color="warning")
        receipt = None
    elif trigger == "close-checkout-button":
        api_request("POST", "cart/checkout/close")
        receipt = None
    elif trigger == "complete-button":
        status, body = api_request("POST", "cart/checkout/complete", json={"cash_received": cash_received or ""})
        if status == 200:
            receipt = body["receipt"]
        else:
            message = dbc.Alert(error_message(body, "Failed to complete transaction"), color="danger")

    status, cart = api_request("GET", "cart")
    if status != 200:
        return None, receipt, message
    return cart, receipt, message


@app.callback(
    [Output("cart-lines", "children"),
     Output("cart-total", "children"),
     Output("checkout-total", "children"),
     Output("checkout-modal", "is_open")],
    [Input("cart-store", "data")],
)
def render_cart(cart):
    if not cart:
        return html.P("Cart is empty"), format_currency(0), None, False

    lines = [
        dbc.Row([
            dbc.Col(html.Span(item["name"]), width=5),
            dbc.Col(dcc.Input(
                id={"type": "cart-quantity", "index": item["id"]},
                type="number", min=1, value=item["quantity"], debounce=True, style={"width": "60px"},
            ), width=3),
            dbc.Col(format_currency(item["line_total"]), width=3),
            dbc.Col(dbc.Button("x", id={"type": "remove-from-cart", "index": item["id"]}, size="sm",
                               color="link"), width=1),
        ], className="mb-2")
        for item in cart["items"]
    ] or [html.P("Cart is empty")]

    total = format_currency(cart["total"])
    return lines, total, f"Total: {total}", cart["is_checkout_open"]


@app.callback(
    [Output("change-display", "children"), Output("complete-button", "disabled")],
    [Input("cash-input", "value"), Input("cart-store", "data")],
)
def preview_change(cash_received, cart):
    if not cart or not cart.get("items"):
        return None, True
    status, body = api_request("POST", "cart/checkout/preview", json={"cash_received": cash_received or ""})
    if status != 200:
        return dbc.Alert(error_message(body, "Invalid amount"), color="warning"), True

    change = html.Span(f"Change: {format_currency(body['change'])}")
    if body["cash_received"] > body["cash_limit"]:
        return [change, html.Div(f"Cash exceeds the limit of {format_currency(body['cash_limit'])}",
                                 className="text-danger")], True
    return change, not body["can_complete"]


@app.callback(
    Output("recent-transactions", "children"),
    [Input("cart-store", "data"), Input("session-store", "data")],
)
def update_recent_transactions(cart, session):
    if not (session or {}).get("is_authenticated"):
        return None
    status, body = api_request("GET", "transactions/recent")
    transactions = body.get("transactions", []) if status == 200 else []
    if not transactions:
        return html.P("No transactions yet")
    return [
        dbc.Row([
            dbc.Col(html.Small(datetime.fromisoformat(t["timestamp"]).astimezone().strftime("%m/%d %I:%M %p")), width=3),
            dbc.Col(html.Small(t["cashier_name"]), width=3),
            dbc.Col(html.Small(f"{t['item_count']} items"), width=2),
            dbc.Col(html.Small(format_currency(t["total"])), width=2),
            dbc.Col(dbc.Badge(t["status"], color="success" if t["status"] == "completed" else "danger"), width=2),
        ], className="mb-1")
        for t in transactions
    ]


@app.callback(
    [Output("total-sales", "children"),
     Output("total-transactions", "children"),
     Output("average-sale", "children"),
     Output("category-chart", "figure"),
     Output("date-chart", "figure"),
     Output("cashier-table", "children")],
    [Input("time-frame", "value"), Input("tabs", "active_tab")],
)
def update_analytics(time_frame, active_tab):
    if active_tab != "analytics":
        raise PreventUpdate

    status, summary = api_request("GET", "analytics/summary", params={"time_frame": time_frame})
    if status != 200:
        raise PreventUpdate
    _, cashiers = api_request("GET", "analytics/cashiers")

    categories = pd.DataFrame(summary["sales_by_category"], columns=["category", "amount"])
    category_chart = px.pie(categories, names="category", values="amount", hole=0.4)
    category_chart.update_layout(height=350, margin=dict(t=20, b=20))

    dates = pd.DataFrame(summary["sales_by_date"], columns=["date", "amount"])
    date_chart = px.bar(dates, x="date", y="amount")
    date_chart.update_layout(height=350, margin=dict(t=20, b=20), xaxis_title="Date", yaxis_title="Sales")

    rows = [
        dbc.Row([
            dbc.Col(c["cashier_name"], width=6),
            dbc.Col(f"{c['items_sold']} items", width=3),
            dbc.Col(format_currency(c["total_sales"]), width=3),
        ], className="mb-2")
        for c in cashiers.get("cashiers", [])
    ]

    return (
        format_currency(summary["total_sales"]),
        str(summary["total_transactions"]),
        format_currency(summary["average_transaction_value"]),
        category_chart,
        date_chart,
        rows or html.P("No completed sales"),
    )


@app.callback(
    Output("pending-profiles", "children"),
    [Input("refresh-pending-button", "n_clicks"),
     Input({"type": "approve-profile", "index": ALL}, "n_clicks"),
     Input("tabs", "active_tab")],
    prevent_initial_call=True,
)
def update_pending_profiles(refresh_clicks, approve_clicks, active_tab):
    if active_tab != "admin":
        raise PreventUpdate

    trigger = dash.ctx.triggered_id
    if isinstance(trigger, dict) and dash.ctx.triggered[0]["value"]:
        api_request("POST", f"admin/profiles/{trigger['index']}/approve")

    status, body = api_request("GET", "admin/pending-profiles")
    if status != 200:
        return dbc.Alert(error_message(body, "Failed to fetch pending users"), color="danger")
    if not body["profiles"]:
        return html.P("No pending approvals")

    return [
        dbc.Row([
            dbc.Col(profile["full_name"], width=6),
            dbc.Col(profile["role"], width=3),
            dbc.Col(dbc.Button("Approve", id={"type": "approve-profile", "index": profile["id"]},
                               size="sm", color="success"), width=3),
        ], className="mb-2")
        for profile in body["profiles"]
    ]


if __name__ == "__main__":
    app.run(
        debug=settings.debug,
        host=settings.dashboard_host,
        port=settings.dashboard_port,
    )
