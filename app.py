"""
app.py
Streamlit admin dashboard for Yeng Shipping (parcels from Miami to Haiti).
Run: streamlit run app.py
"""

from __future__ import annotations

import pandas as pd
import streamlit as st

import auth
import db
import pricing
import utils
from api import ApiClient, ApiError
from config import configure_logging
from models import (
    PARCEL_STATUSES,
    PAYMENT_METHOD_LABELS,
    CustomerCreate,
    DashboardStats,
    ParcelCreate,
    PaymentCreate,
    PaymentMethod,
    StatusUpdate,
)

st.set_page_config(page_title="Yeng Shipping Admin", layout="wide")

PAGES = [
    "Dashboard",
    "Shipments",
    "New shipment",
    "Customers",
    "New customer",
    "Payments",
    "Invoices",
    "Scan",
    "Reports",
]


def init_once():
    configure_logging()
    db.init_db()


def get_client() -> ApiClient:
    if "client" not in st.session_state:
        st.session_state.client = ApiClient(auth.Session.restore())
    return st.session_state.client


def go_to(page: str, **state):
    for key, value in state.items():
        st.session_state[key] = value
    st.session_state.page = page
    st.rerun()


def flash(message: str):
    st.session_state.flash = message


def call(fn, *args, default=None, **kwargs):
    """
    Run one API call for a page. Errors are shown to the operator and the
    page falls back to `default`; a 401 ends the session.
    """
    try:
        return fn(*args, **kwargs)
    except ApiError as e:
        if e.is_unauthorized:
            auth.logout(get_client())
            flash("Your session has expired. Please log in again.")
            st.rerun()
        st.error(e.message)
        return default


def status_badge(status: str, category: pricing.StatusCategory) -> str:
    color = pricing.category_color(category)
    return f"<span style='color:{color}; font-weight:600'>● {status or '—'}</span>"


def parcel_badge(status: str) -> str:
    return status_badge(status, pricing.classify_parcel_status(status))


def payment_badge(status: str) -> str:
    return status_badge(status, pricing.classify_payment_status(status))


# ---------- Auth screens ----------

def login_screen():
    st.title("📦 Yeng Shipping")
    st.caption("Admin dashboard")

    if st.session_state.get("flash"):
        st.info(st.session_state.pop("flash"))

    col1, _ = st.columns([1, 1])
    with col1:
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if st.button("Log in", type="primary", disabled=not (email and password)):
            try:
                auth.login(get_client(), email, password)
            except ApiError as e:
                st.error(e.message or "Incorrect email or password.")
            else:
                st.session_state.page = "Dashboard"
                st.rerun()


def logout():
    auth.logout(get_client())
    for key in ("parcel_id", "customer_id", "invoice_id", "payment_parcel_id", "parcel_search"):
        st.session_state.pop(key, None)
    flash("Logged out.")


# ---------- Dashboard ----------

def dashboard_page(client: ApiClient):
    st.header("📊 Dashboard")

    stats = call(client.get_dashboard_stats) or DashboardStats()

    c1, c2, c3, c4 = st.columns(4)
    c1.metric(
        "Total parcels",
        f"{int(stats.total_shipments.value):,}",
        delta=f"{stats.total_shipments.growth:+.1f}%",
    )
    c2.metric(
        "Revenue",
        utils.format_currency(stats.revenue.value),
        delta=f"{stats.revenue.growth:+.1f}%",
    )
    c3.metric("Out for delivery", stats.active_deliveries.value)
    c3.caption(f"{stats.active_deliveries.ready_for_pickup} ready for pickup")
    c4.metric("Pending tasks", stats.pending_tasks.value)
    c4.caption(f"{stats.pending_tasks.urgent_issues} urgent")

    st.divider()

    left, right = st.columns(2)
    with left:
        st.subheader("Shipping volume (last 7 days)")
        volume = call(client.get_shipping_volume, days=7, default=[])
        if volume:
            df = pd.DataFrame([{"day": v.day, "count": v.count} for v in volume])
            st.bar_chart(df.set_index("day")["count"])
        else:
            st.caption("No shipping volume data.")

    with right:
        st.subheader("Quick actions")
        if st.button("📦 Register a parcel"):
            go_to("New shipment")
        if st.button("🔎 Scan a barcode"):
            go_to("Scan")
        if st.button("💳 Record a payment"):
            go_to("Payments")


# ---------- Shipments ----------

def shipments_page(client: ApiClient):
    st.header("📦 Shipments")

    with st.sidebar:
        st.subheader("Search & Filters")
        search = st.text_input("Search (tracking, barcode, customer)", key="parcel_search")
        status_filter = st.selectbox("Status", ["All"] + PARCEL_STATUSES)

    parcels = call(
        client.get_parcels,
        status=None if status_filter == "All" else status_filter,
        search=search.strip() or None,
        default=[],
    )
    st.dataframe(utils.parcels_to_frame(parcels), use_container_width=True, hide_index=True)
    if parcels:
        st.download_button(
            "Download parcels.csv",
            data=utils.frame_to_csv_bytes(utils.parcels_to_frame(parcels)),
            file_name="parcels.csv",
            mime="text/csv",
        )

    st.divider()

    options = {p.tracking_number: p.id for p in parcels}
    current = st.session_state.get("parcel_id")
    labels = ["(none)"] + list(options.keys())
    default_index = next((i for i, k in enumerate(labels) if options.get(k) == current), 0)
    chosen = st.selectbox("Parcel", labels, index=default_index)
    if chosen != "(none)":
        st.session_state.parcel_id = options[chosen]
        parcel_detail(client, options[chosen])
    elif current and current not in options.values():
        # Opened from another page (e.g. invoice or new parcel)
        parcel_detail(client, current)


def parcel_detail(client: ApiClient, parcel_id: str):
    parcel = call(client.get_parcel, parcel_id)
    if parcel is None:
        st.info("Parcel not found.")
        return

    st.subheader(f"Parcel {parcel.tracking_number}")
    main, side = st.columns([2, 1])

    with main:
        st.markdown(parcel_badge(parcel.status), unsafe_allow_html=True)
        if parcel.current_location:
            st.caption(f"📍 {parcel.current_location}")

        st.markdown("**Package details**")
        d1, d2, d3 = st.columns(3)
        d1.write(f"Description: {parcel.description or '—'}")
        d2.write(f"Weight: {utils.format_weight(parcel.weight)}")
        d3.write(f"Declared value: {utils.format_currency(parcel.declared_value)}")
        if parcel.barcode:
            st.write(f"Barcode: `{parcel.barcode}`")

        st.markdown("**Sender (USA)**")
        st.write(parcel.sender_name or "—")
        st.write(parcel.sender_address or "")
        st.write(f"{parcel.sender_city or ''}, {parcel.sender_state or ''} {parcel.sender_zip_code or ''}")

        if parcel.tracking_events:
            st.markdown("**Tracking history**")
            for event in parcel.tracking_events:
                st.write(f"• {event.description or event.status or ''} — {event.location or ''}")
                st.caption(utils.format_datetime(event.timestamp))

        st.markdown("**Update status**")
        with st.form(f"status_form_{parcel.id}"):
            index = PARCEL_STATUSES.index(parcel.status) if parcel.status in PARCEL_STATUSES else 0
            new_status = st.selectbox("New status", PARCEL_STATUSES, index=index)
            location = st.text_input("Location (optional)")
            description = st.text_input("Description (optional)")
            if st.form_submit_button("Update status", type="primary"):
                update = StatusUpdate(
                    status=new_status,
                    location=location.strip() or None,
                    description=description.strip() or None,
                )
                if call(client.update_parcel_status, parcel.id, update) is not None:
                    # Reload the full parcel instead of merging local state
                    flash(f"Status updated to {new_status}.")
                    st.rerun()

    with side:
        if parcel.customer:
            st.markdown("**Customer**")
            st.write(parcel.customer.full_name)
            st.caption(parcel.customer.email or "")
            st.code(parcel.customer.custom_address, language=None)

        st.markdown("**Finances**")
        st.write(f"Shipping fee: {utils.format_currency(parcel.shipping_fee)}")
        if parcel.discount > 0:
            st.write(f"Discount: -{utils.format_currency(parcel.discount)}")
        st.write(f"Tax: {utils.format_currency(parcel.tax_amount)}")
        st.write(f"**Total: {utils.format_currency(parcel.total_amount)}**")
        balance = pricing.compute_balance(parcel.total_amount, parcel.payments)
        st.write(f"Paid: {utils.format_currency(balance.total_paid)}")
        st.write(f"Balance: {utils.format_currency(balance.balance)}")
        st.markdown(payment_badge(parcel.payment_status), unsafe_allow_html=True)

        st.markdown("**Dates**")
        st.caption(f"Created: {utils.format_datetime(parcel.created_at)}")
        if parcel.estimated_arrival:
            st.caption(f"Estimated arrival: {utils.format_datetime(parcel.estimated_arrival)}")


def new_shipment_page(client: ApiClient):
    st.header("➕ New parcel")

    # 1. Customer
    st.subheader("1. Customer")
    selected = None
    preset_id = st.session_state.get("new_parcel_customer_id")
    if preset_id:
        selected = call(client.get_customer, preset_id)
        if selected and st.button("Choose another customer"):
            st.session_state.new_parcel_customer_id = None
            st.rerun()

    if selected is None:
        term = st.text_input("Search by code or address", placeholder="e.g. 4582, PJean, YENGSHIPPING...")
        if utils.should_search_code(term):
            results = call(client.search_customers_by_code, term.strip(), default=[])
            if results:
                labels = {utils.customer_label(c): c for c in results}
                selected = labels[st.selectbox("Matching customers", list(labels.keys()))]
            else:
                st.caption("No matching customers.")

    if selected is None:
        st.info("Select a customer to continue.")
        return

    st.success(
        f"US delivery address: **{selected.custom_address}**, "
        f"{utils.WAREHOUSE_ADDRESS}, {utils.WAREHOUSE_CITY}, {utils.WAREHOUSE_STATE} {utils.WAREHOUSE_ZIP}"
    )

    # 2. Sender (USA); defaults follow the selected customer
    st.subheader("2. Sender (USA)")
    defaults = utils.warehouse_sender_fields(selected)
    s1, s2 = st.columns(2)
    with s1:
        sender = {
            "sender_name": st.text_input("Full name", value=defaults["sender_name"], key=f"sn_{selected.id}"),
            "sender_address": st.text_input("Address", value=defaults["sender_address"], key=f"sa_{selected.id}"),
        }
    with s2:
        sender["sender_city"] = st.text_input("City", value=defaults["sender_city"], key=f"sc_{selected.id}")
        sender["sender_state"] = st.text_input("State", value=defaults["sender_state"], key=f"ss_{selected.id}")
        sender["sender_zip_code"] = st.text_input("ZIP code", value=defaults["sender_zip_code"], key=f"sz_{selected.id}")

    # 3. Package
    st.subheader("3. Package details")
    p1, p2, p3 = st.columns(3)
    with p1:
        description = st.text_input("Description", placeholder="Clothes, electronics, etc.")
        barcode = st.text_input("Barcode (optional)")
    with p2:
        weight = st.text_input("Weight (lbs)", value="")
        declared_value = st.text_input("Declared value (USD)", value="")
    with p3:
        length = st.text_input("Length (optional)")
        width = st.text_input("Width (optional)")
        height = st.text_input("Height (optional)")
    notes = st.text_input("Notes (optional)")

    # 4. Pricing
    st.subheader("4. Pricing")
    mode = st.radio(
        "Pricing mode",
        pricing.PRICING_MODES,
        format_func=lambda m: "Automatic" if m == pricing.AUTO else "Manual",
        horizontal=True,
    )
    fee_in = discount_in = tax_in = ""
    if mode == pricing.MANUAL:
        m1, m2, m3 = st.columns(3)
        fee_in = m1.text_input("Shipping fee")
        discount_in = m2.text_input("Discount")
        tax_in = m3.text_input("Tax")

    quote = pricing.estimate(
        mode,
        weight=weight,
        declared_value=declared_value,
        shipping_fee=fee_in,
        discount=discount_in,
        tax_amount=tax_in,
    )
    if mode == pricing.AUTO:
        st.caption(
            f"Weight: {utils.parse_number(weight)} lbs × ${pricing.RATE_PER_POUND} = "
            f"{utils.format_currency(quote.weight_charge)}  ·  "
            f"Value: {utils.format_currency(declared_value)} × 2% = {utils.format_currency(quote.value_charge)}"
        )

    q1, q2, q3, q4 = st.columns(4)
    q1.metric("Shipping fee", utils.format_currency(quote.shipping_fee))
    if mode == pricing.MANUAL and quote.discount > 0:
        q2.metric("Discount", f"-{utils.format_currency(quote.discount)}")
    q3.metric("Tax", utils.format_currency(quote.tax_amount))
    q4.metric("Total", utils.format_currency(quote.total))
    if quote.total < 0:
        st.warning("The discount is larger than the fee plus tax; the total is negative.")

    errors = utils.validate_parcel_inputs(selected.id, sender, description, weight, declared_value)
    if mode == pricing.MANUAL and not fee_in.strip():
        errors.append("Shipping fee is required in manual pricing.")
    for e in errors:
        st.error(e)

    if st.button("Register parcel", type="primary", disabled=bool(errors)):
        manual_fields = {}
        if mode == pricing.MANUAL:
            manual_fields = {
                "shipping_fee": float(quote.shipping_fee),
                "discount": float(quote.discount),
                "tax_amount": float(quote.tax_amount),
            }
        data = ParcelCreate(
            customer_id=selected.id,
            barcode=barcode.strip() or None,
            description=description.strip(),
            weight=float(utils.parse_number(weight)),
            declared_value=float(utils.parse_number(declared_value)),
            length=float(utils.parse_number(length)) if length.strip() else None,
            width=float(utils.parse_number(width)) if width.strip() else None,
            height=float(utils.parse_number(height)) if height.strip() else None,
            notes=notes.strip() or None,
            **{k: v.strip() for k, v in sender.items()},
            **manual_fields,
        )
        parcel = call(client.create_parcel, data)
        if parcel is not None:
            flash(f"Parcel {parcel.tracking_number} registered.")
            go_to("Shipments", parcel_id=parcel.id, new_parcel_customer_id=None)


# ---------- Customers ----------

def customers_page(client: ApiClient):
    st.header("👥 Customers")

    with st.sidebar:
        st.subheader("Search")
        search = st.text_input("Search (name, email, phone, code)")

    customers = call(client.get_customers, search.strip() or None, default=[])
    st.dataframe(utils.customers_to_frame(customers), use_container_width=True, hide_index=True)

    st.divider()

    options = {utils.customer_label(c): c.id for c in customers}
    current = st.session_state.get("customer_id")
    labels = ["(none)"] + list(options.keys())
    default_index = next((i for i, k in enumerate(labels) if options.get(k) == current), 0)
    chosen = st.selectbox("Customer", labels, index=default_index)
    if chosen != "(none)":
        st.session_state.customer_id = options[chosen]
        customer_detail(client, options[chosen])
    elif current and current not in options.values():
        customer_detail(client, current)


def customer_detail(client: ApiClient, customer_id: str):
    customer = call(client.get_customer, customer_id)
    if customer is None:
        st.info("Customer not found.")
        return

    parcels = call(client.get_parcels, customer_id=customer.id, default=[])

    st.subheader(customer.full_name)
    main, side = st.columns([2, 1])
    with main:
        i1, i2 = st.columns(2)
        i1.write(f"Email: {customer.email or '—'}")
        i2.write(f"Phone: {customer.phone or '—'}")
        st.caption(f"Registered: {utils.format_date(customer.created_at)}")

        st.markdown("**US shipping address**")
        st.code(customer.custom_address, language=None)
        if customer.full_usa_address:
            st.text(customer.full_usa_address)

        st.markdown("**Parcel history**")
        if parcels:
            st.dataframe(utils.parcels_to_frame(parcels), use_container_width=True, hide_index=True)
        else:
            st.caption("No parcels for this customer yet.")
        if st.button("+ New parcel for this customer"):
            go_to("New shipment", new_parcel_customer_id=customer.id)

    with side:
        stats = utils.customer_parcel_stats(parcels)
        st.metric("Total parcels", stats["total_parcels"])
        st.metric("Total billed", utils.format_currency(stats["total_billed"]))
        st.metric("In transit", stats["in_transit"])
        st.metric("Delivered", stats["delivered"])

        st.markdown("**Haiti address**")
        st.write(customer.haiti_address or "—")
        st.write(f"{customer.haiti_city or ''}, {customer.haiti_country or ''}")


def new_customer_page(client: ApiClient):
    st.header("➕ New customer")

    col1, col2 = st.columns(2)
    with col1:
        first_name = st.text_input("First name")
        last_name = st.text_input("Last name")
        email = st.text_input("Email")
        phone = st.text_input("Phone")
    with col2:
        haiti_address = st.text_input("Address in Haiti")
        haiti_city = st.text_input("City")
        haiti_country = st.text_input("Country", value="Haiti")

    errors = utils.validate_customer_inputs(first_name, last_name, email, phone, haiti_address, haiti_city)
    if errors and any([first_name, last_name, email, phone]):
        for e in errors:
            st.error(e)

    if st.button("Create customer", type="primary", disabled=bool(errors)):
        data = CustomerCreate(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            haiti_address=haiti_address.strip(),
            haiti_city=haiti_city.strip(),
            haiti_country=haiti_country.strip() or "Haiti",
        )
        customer = call(client.create_customer, data)
        if customer is not None:
            flash(f"Customer created. Custom address: {customer.custom_address}")
            go_to("Customers", customer_id=customer.id)


# ---------- Payments ----------

def payments_page(client: ApiClient):
    st.header("💳 Payments")

    st.subheader("Find parcel")
    c1, c2 = st.columns([3, 1])
    with c1:
        tracking = st.text_input("Tracking number", placeholder="YNG-12345678")
    with c2:
        st.write("")
        if st.button("Look up", disabled=not tracking.strip()):
            parcel = call(client.get_parcel_by_tracking, tracking)
            st.session_state.payment_parcel_id = parcel.id if parcel else None

    parcel_id = st.session_state.get("payment_parcel_id")
    if not parcel_id:
        st.caption("Look up a parcel by tracking number to record a payment.")
        return

    parcel = call(client.get_parcel, parcel_id)
    if parcel is None:
        st.info("Parcel not found.")
        return

    payments = call(client.get_payments, parcel_id=parcel.id, default=[])
    balance = pricing.compute_balance(parcel.total_amount, payments)

    st.markdown(f"**{parcel.tracking_number}**")
    m1, m2, m3 = st.columns(3)
    m1.metric("Total", utils.format_currency(balance.total_amount))
    m2.metric("Paid", utils.format_currency(balance.total_paid))
    m3.metric("Balance", utils.format_currency(balance.balance))
    st.markdown(payment_badge(parcel.payment_status), unsafe_allow_html=True)

    st.subheader("Record payment")
    f1, f2 = st.columns(2)
    with f1:
        amount = st.text_input("Amount", value=str(balance.balance) if balance.balance > 0 else "")
        reference = st.text_input("Reference (optional)", placeholder="Transaction number")
    with f2:
        method = st.selectbox(
            "Payment method",
            list(PaymentMethod),
            format_func=lambda m: PAYMENT_METHOD_LABELS[m],
        )
        notes = st.text_input("Notes (optional)")

    errors = utils.validate_payment_inputs(parcel, amount)
    if amount.strip():
        for e in errors:
            st.error(e)

    if st.button("Record payment", type="primary", disabled=bool(errors)):
        data = PaymentCreate(
            parcel_id=parcel.id,
            amount=float(utils.parse_number(amount)),
            method=method,
            reference=reference.strip() or None,
            received_by=client.session.user.id if client.session.user else "",
            notes=notes.strip() or None,
        )
        if call(client.create_payment, data) is not None:
            flash("Payment recorded.")
            st.rerun()

    st.divider()

    st.subheader("Payment history")
    if payments:
        st.dataframe(utils.payments_to_frame(payments), use_container_width=True, hide_index=True)
        receipt_id = st.selectbox("Receipt for payment", [p.id for p in payments])
        if st.button("Prepare receipt"):
            st.session_state.receipt = (receipt_id, call(client.download_payment_receipt, receipt_id))
        prepared = st.session_state.get("receipt")
        if prepared and prepared[0] == receipt_id and prepared[1]:
            st.download_button(
                "Download receipt",
                data=prepared[1],
                file_name=f"receipt-{receipt_id}.pdf",
                mime="application/pdf",
            )
    else:
        st.caption("No payments for this parcel yet.")


# ---------- Invoices ----------

def invoices_page(client: ApiClient):
    st.header("🧾 Invoices")

    invoices = call(client.get_invoices, default=[])
    if not invoices:
        st.info("No invoices yet. Invoices are generated when a parcel is registered.")
        return

    rows = [
        {
            "invoice_number": inv.invoice_number,
            "tracking_number": inv.parcel.tracking_number if inv.parcel else "",
            "customer": utils.customer_label(inv.parcel.customer) if inv.parcel and inv.parcel.customer else "",
            "total_amount": float(inv.parcel.total_amount) if inv.parcel else 0.0,
            "payment_status": inv.parcel.payment_status if inv.parcel else "",
            "created_at": utils.format_date(inv.created_at),
        }
        for inv in invoices
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    st.divider()

    options = {inv.invoice_number: inv.id for inv in invoices}
    chosen = st.selectbox("Invoice", ["(none)"] + list(options.keys()))
    if chosen != "(none)":
        invoice_detail(client, options[chosen])


def invoice_detail(client: ApiClient, invoice_id: str):
    invoice = call(client.get_invoice, invoice_id)
    if invoice is None or invoice.parcel is None:
        st.info("Invoice not found.")
        return

    parcel = invoice.parcel
    balance = pricing.compute_balance(parcel.total_amount, parcel.payments)

    st.subheader(f"Invoice {invoice.invoice_number}")
    main, side = st.columns([2, 1])
    with main:
        st.caption(f"Created: {utils.format_datetime(invoice.created_at)}")
        st.markdown(payment_badge(parcel.payment_status), unsafe_allow_html=True)

        if parcel.customer:
            st.markdown("**Customer**")
            st.write(parcel.customer.full_name)
            st.write(parcel.customer.email or "")
            st.code(parcel.customer.custom_address, language=None)

        st.markdown("**Parcel**")
        st.write(f"{parcel.tracking_number} · {parcel.description or '—'}")
        st.write(
            f"Weight: {utils.format_weight(parcel.weight)} · "
            f"Declared value: {utils.format_currency(parcel.declared_value)} · Status: {parcel.status}"
        )
        if st.button("Open parcel"):
            go_to("Shipments", parcel_id=parcel.id)

        d1, d2 = st.columns(2)
        with d1:
            if st.button("Prepare PDF"):
                st.session_state.invoice_pdf = (invoice.id, call(client.download_invoice_pdf, invoice.id))
            prepared = st.session_state.get("invoice_pdf")
            if prepared and prepared[0] == invoice.id and prepared[1]:
                st.download_button(
                    "Download PDF",
                    data=prepared[1],
                    file_name=f"{invoice.invoice_number}.pdf",
                    mime="application/pdf",
                )
        with d2:
            confirm = st.checkbox("Confirm sending to the customer", value=False, key=f"email_{invoice.id}")
            if st.button("Send by email", disabled=not confirm):
                if call(client.send_invoice_email, invoice.id) is not None:
                    st.success("Email sent.")

    with side:
        st.markdown("**Summary**")
        st.write(f"Shipping fee: {utils.format_currency(parcel.shipping_fee)}")
        if parcel.discount > 0:
            st.write(f"Discount: -{utils.format_currency(parcel.discount)}")
        st.write(f"Tax: {utils.format_currency(parcel.tax_amount)}")
        st.write(f"**Total: {utils.format_currency(parcel.total_amount)}**")
        st.write(f"Paid: {utils.format_currency(balance.total_paid)}")
        st.write(f"Balance due: {utils.format_currency(balance.balance)}")
        if not balance.is_settled:
            if st.button("Record a payment"):
                go_to("Payments", payment_parcel_id=parcel.id)

        st.markdown("**Payment history**")
        if parcel.payments:
            st.dataframe(utils.payments_to_frame(parcel.payments), use_container_width=True, hide_index=True)
        else:
            st.caption("No payments recorded.")


# ---------- Scan ----------

def scan_page(client: ApiClient):
    st.header("🔎 Scan a barcode")

    barcode = st.text_input("Barcode", placeholder="Scan or type the barcode...")
    if st.button("Search", type="primary", disabled=not barcode.strip()):
        go_to("Shipments", parcel_search=barcode.strip(), parcel_id=None)


# ---------- Reports ----------

def reports_page(client: ApiClient):
    st.header("📈 Reports")

    statuses = call(client.get_status_breakdown, default=[])
    revenue = call(client.get_revenue)
    growth = call(client.get_customer_growth, months=6, default=[])

    status_df = pd.DataFrame([{"status": s.status, "count": s.count} for s in statuses])
    growth_df = pd.DataFrame([{"month": g.month, "count": g.count} for g in growth])

    overview, revenue_tab, shipments_tab, customers_tab = st.tabs(
        ["Overview", "Revenue", "Shipments", "Customers"]
    )

    with overview:
        left, right = st.columns(2)
        with left:
            st.subheader("Parcels by status")
            if not status_df.empty:
                st.bar_chart(status_df.set_index("status")["count"])
            else:
                st.caption("No data.")
        with right:
            st.subheader("Customer growth")
            if not growth_df.empty:
                st.line_chart(growth_df.set_index("month")["count"])
            else:
                st.caption("No data.")

    with revenue_tab:
        if revenue is None:
            st.caption("Revenue report unavailable.")
        else:
            r1, r2, r3 = st.columns(3)
            r1.metric("Total revenue", utils.format_currency(revenue.total_revenue))
            r2.metric("Transactions", revenue.transaction_count)
            r3.metric("Average amount", utils.format_currency(utils.average_transaction(revenue)))
            st.subheader("Revenue by payment method")
            if revenue.by_method:
                st.dataframe(
                    pd.DataFrame([{"method": m.method, "total": utils.format_currency(m.total)} for m in revenue.by_method]),
                    use_container_width=True,
                    hide_index=True,
                )
            else:
                st.caption("No payments yet.")

    with shipments_tab:
        st.subheader("Shipping statistics")
        cols = st.columns(4)
        for i, s in enumerate(statuses):
            with cols[i % 4]:
                st.markdown(parcel_badge(s.status), unsafe_allow_html=True)
                st.metric(s.status, s.count, label_visibility="collapsed")

    with customers_tab:
        st.subheader("Customer growth (6 months)")
        if not growth_df.empty:
            st.line_chart(growth_df.set_index("month")["count"], height=400)
        else:
            st.caption("No data.")


def main_app():
    client = get_client()
    user = client.session.user

    st.sidebar.title("📦 Yeng Shipping")
    st.sidebar.caption(f"Logged in as: {user.full_name or user.email}" if user else "Logged in")

    if "page" not in st.session_state or st.session_state.page not in PAGES:
        st.session_state.page = "Dashboard"
    st.session_state.page = st.sidebar.radio("Navigate", PAGES, index=PAGES.index(st.session_state.page))

    if st.sidebar.button("Logout"):
        logout()
        st.rerun()

    if st.session_state.get("flash"):
        st.success(st.session_state.pop("flash"))

    if st.session_state.page == "Dashboard":
        dashboard_page(client)
    elif st.session_state.page == "Shipments":
        shipments_page(client)
    elif st.session_state.page == "New shipment":
        new_shipment_page(client)
    elif st.session_state.page == "Customers":
        customers_page(client)
    elif st.session_state.page == "New customer":
        new_customer_page(client)
    elif st.session_state.page == "Payments":
        payments_page(client)
    elif st.session_state.page == "Invoices":
        invoices_page(client)
    elif st.session_state.page == "Scan":
        scan_page(client)
    elif st.session_state.page == "Reports":
        reports_page(client)


# --------- App entry ---------

def run():
    init_once()

    if not get_client().session.is_authenticated:
        login_screen()
        return

    main_app()


if __name__ == "__main__":
    run()
