"""
Truck Transportation Routes page.

Run with:
    streamlit run route_dashboard/page.py
"""

import logging

import streamlit as st
from streamlit_folium import st_folium

from fleetops.config import get_settings
from route_dashboard.api_client import BackendClient
from route_dashboard.map_renderer import RouteMapWidget, render_route
from route_dashboard.state import MODE_LABELS, Mode, PageState

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("route_dashboard")

st.set_page_config(layout="wide", page_title="Truck Transportation Routes")

STATUS_BADGES = {
    "pending_calculation": "🟡 Pending calculation",
    "planned": "🔵 Planned",
    "active": "🟢 Active",
    "completed": "⚪ Completed",
}
NOTICE_ICONS = {"info": "✅", "warning": "⚠️", "error": "❌"}

# --- State ---
if 'page' not in st.session_state:
    st.session_state.page = PageState()
if 'backend_url' not in st.session_state:
    st.session_state.backend_url = settings.backend_url
if 'map_widget' not in st.session_state:
    st.session_state.map_widget = RouteMapWidget(
        api_key=settings.tomtom_api_key if settings.routing_configured else None,
        center=(settings.map_default_center_lat, settings.map_default_center_lng),
        zoom=settings.map_default_zoom,
    )
if 'driver_filter' not in st.session_state:
    st.session_state.driver_filter = None

page: PageState = st.session_state.page
widget: RouteMapWidget = st.session_state.map_widget
backend_client = BackendClient(st.session_state.backend_url, settings.api_prefix)


def show_notices(notices):
    for notice in notices:
        st.toast(notice.message, icon=NOTICE_ICONS.get(notice.level, "ℹ️"))


def enter_map_view():
    """Initialize the map widget for the map view; gives up quietly if the container never appears."""
    notices = widget.initialize(
        container_ready=lambda: page.mode is Mode.MAP,
        max_attempts=settings.map_init_max_attempts,
        delay=settings.map_init_retry_delay_seconds,
    )
    page.map_loaded = widget.loaded
    show_notices(notices)


def recalculate(route_id: int):
    with st.spinner("Recalculating truck route..."):
        result = backend_client.recalculate_route(route_id)
    if result.ok:
        show_notices(result.notices)
        st.toast("Route metrics refreshed", icon="✅")
    else:
        st.error(f"Could not recalculate route: {result.error}")


# --- Sidebar ---
with st.sidebar:
    st.header("Backend")
    backend_url_input = st.text_input("Backend URL", value=st.session_state.backend_url)
    if backend_url_input != st.session_state.backend_url:
        st.session_state.backend_url = backend_url_input
        st.rerun()

    if st.button("🔄 Test Connection"):
        is_connected, msg = backend_client.check_health()
        if is_connected:
            st.success(f"✅ {msg}")
        else:
            st.error(f"❌ {msg}")

    st.header("Filter")
    driver_input = st.text_input("Driver ID", value="" if st.session_state.driver_filter is None else str(st.session_state.driver_filter))
    st.session_state.driver_filter = int(driver_input) if driver_input.strip().isdigit() else None


st.title("Truck Transportation Routes")
st.caption("Plan and manage your truck shipment routes with TomTom")

modes = list(Mode)
choice = st.radio(
    "View",
    modes,
    index=modes.index(page.mode),
    format_func=lambda m: MODE_LABELS[m],
    horizontal=True,
    label_visibility="collapsed",
)
if page.select_mode(choice):
    enter_map_view()


# --- Create ---
if page.mode is Mode.CREATE:
    st.subheader("🚚 Plan New Truck Route")
    st.write("Enter origin and destination to calculate the best truck route with TomTom.")

    with st.form("create_route"):
        route_name = st.text_input("Route Name", placeholder="e.g., Miami - Orlando Truck Route")
        origin = st.text_input("Origin", placeholder="e.g., Miami, FL")
        destination = st.text_input("Destination", placeholder="e.g., Orlando, FL")
        submitted = st.form_submit_button("Calculate Truck Route", disabled=page.submitting)

    st.info(
        "Routes are optimized for commercial trucks considering weight, height and width "
        "restrictions, hazardous material regulations and truck-specific road access."
    )

    if submitted:
        if not page.begin_submit():
            st.warning("A route is already being calculated. Please wait.")
        else:
            try:
                with st.spinner("Calculating Truck Route..."):
                    result = backend_client.create_route(
                        route_name, origin, destination, driver_id=st.session_state.driver_filter,
                    )
            finally:
                page.end_submit()

            if result.ok:
                show_notices(result.notices)
                page.selected_route_id = result.route.id
                st.success(f"Route '{result.route.name}' saved: {result.route.display_miles} mi, {result.route.duration_label}")
            else:
                st.error(result.error)


# --- List ---
elif page.mode is Mode.LIST:
    routes = backend_client.list_routes(driver_id=st.session_state.driver_filter)
    if not routes:
        st.info("No truck routes found. Create your first truck route to start planning your shipments.")

    for route in routes:
        with st.container(border=True):
            col_info, col_status = st.columns([4, 1])
            with col_info:
                st.markdown(f"**{route.name}**")
                st.caption(f"📍 {route.origin} → {route.destination}")

                metrics = []
                if route.display_miles is not None:
                    label = f"🚛 {route.display_miles} mi"
                    if route.distance_source == "legacy":
                        label += " (legacy estimate)"
                    metrics.append(label)
                if route.duration_label:
                    metrics.append(f"⏱ {route.duration_label}")
                if metrics:
                    st.write("  ·  ".join(metrics))
                if route.state_breakdown:
                    st.caption("States: " + ", ".join(f"{e.jurisdiction} {e.miles} mi" for e in route.state_breakdown))
            with col_status:
                st.write(STATUS_BADGES.get(route.status, route.status))

            col_view, col_recalc, col_delete = st.columns(3)
            if col_view.button("View on map", key=f"view_{route.id}"):
                if page.view_route(route.id):
                    enter_map_view()
                st.rerun()
            if col_recalc.button("Recalculate", key=f"recalc_{route.id}"):
                recalculate(route.id)
            if col_delete.button("Delete", key=f"delete_{route.id}"):
                if backend_client.delete_route(route.id):
                    st.toast(f"Deleted '{route.name}'", icon="🗑️")
                    st.rerun()
                else:
                    st.error("Could not delete route")


# --- Map ---
else:
    st.subheader("TomTom Truck Route Map")
    routes = backend_client.list_routes(driver_id=st.session_state.driver_filter)
    by_id = {route.id: route for route in routes}

    col_map, col_side = st.columns([2, 1])
    with col_side:
        if routes:
            ids = list(by_id)
            current = page.selected_route_id if page.selected_route_id in by_id else ids[0]
            page.selected_route_id = st.selectbox(
                "Route",
                ids,
                index=ids.index(current),
                format_func=lambda route_id: by_id[route_id].name,
            )
            selected = by_id[page.selected_route_id]
            st.write(f"**{selected.origin}** → **{selected.destination}**")
            if selected.display_miles is not None:
                st.metric("Distance", f"{selected.display_miles} mi")
            if selected.duration_label:
                st.metric("Duration", selected.duration_label)
            if st.button("Recalculate"):
                recalculate(selected.id)
                st.rerun()
        else:
            st.info("No routes to display yet.")

    with col_map:
        if not widget.loaded:
            if settings.routing_configured:
                st.info("Map is not ready. Switch views and come back to retry.")
            else:
                st.info("Please configure your TomTom API key to see the route map.")
        else:
            if page.selected_route_id in by_id:
                show_notices(render_route(widget, by_id[page.selected_route_id]))
            st_folium(widget.map, width="100%", height=500, returned_objects=[])
