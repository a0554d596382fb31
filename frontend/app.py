import os
from datetime import datetime

import requests
import streamlit as st

from render import assistant_html, error_html, place_card_html, user_message_html
from stream_client import stream_chat

# Page configuration
st.set_page_config(
    page_title="MapChat",
    page_icon="📍",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS for better UI
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        color: #1E88E5;
        text-align: center;
        padding: 1rem 0;
        font-weight: bold;
    }
    .chat-message {
        padding: 1rem;
        border-radius: 0.5rem;
        margin: 0.5rem 0;
    }
    .user-message {
        background-color: #1c669c;
        border-left: 4px solid #1E88E5;
    }
    .assistant-message {
        background-color: #2c7524;
        border-left: 4px solid #43A047;
    }
    .assistant-message a {
        color: #90CAF9;
        text-decoration: underline;
    }
    .error-message {
        background-color: #7a2020;
        border-left: 4px solid #E53935;
    }
    .place-card {
        padding: 0.75rem;
        border-radius: 0.5rem;
        border: 1px solid #444;
        margin-bottom: 0.5rem;
    }
    .success-box {
        padding: 1rem;
        background-color: #207a27;
        border-radius: 0.5rem;
        border-left: 4px solid #43A047;
        margin: 1rem 0;
    }
</style>
""", unsafe_allow_html=True)

# Backend API configuration
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")

# Initialize session state
if "chat_history" not in st.session_state:
    st.session_state.chat_history = []

if "use_location" not in st.session_state:
    st.session_state.use_location = False

def check_backend_health() -> bool:
    """Check if backend is running."""
    try:
        response = requests.get(f"{BACKEND_URL}/api/health", timeout=2)
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False

def render_assistant_text(container, content: str):
    container.markdown(assistant_html(content), unsafe_allow_html=True)

def render_places(places: list):
    """Map of all places with coordinates, then one card per place."""
    located = [p for p in places if p.get("lat") is not None and p.get("lng") is not None]
    if located:
        st.map({"lat": [p["lat"] for p in located], "lon": [p["lng"] for p in located]}, zoom=12)

    columns = st.columns(2)
    for i, place in enumerate(places[:6]):
        columns[i % 2].markdown(place_card_html(place), unsafe_allow_html=True)

def display_message(message: dict):
    """Display a chat message with proper formatting."""
    if message["role"] == "user":
        st.markdown(user_message_html(message["content"]), unsafe_allow_html=True)
        return

    if message.get("places"):
        render_places(message["places"])
    if message.get("content"):
        render_assistant_text(st, message["content"])
    if message.get("error"):
        st.markdown(error_html(message["error"]), unsafe_allow_html=True)

def run_turn(user_location: dict | None) -> dict:
    """Stream one assistant turn into the page and return the finished message."""
    assistant = {"role": "assistant", "content": "", "places": [], "error": None,
                 "timestamp": datetime.now().isoformat()}
    history = [{"role": m["role"], "content": m["content"]} for m in st.session_state.chat_history]

    places_area = st.container()
    text_area = st.empty()

    try:
        with st.spinner("🔍 Searching places..."):
            for event in stream_chat(BACKEND_URL, history, user_location):
                if event.get("type") == "places":
                    assistant["places"] = event.get("data") or []
                    with places_area:
                        render_places(assistant["places"])
                elif event.get("error"):
                    assistant["error"] = event["error"]
                elif event.get("content"):
                    assistant["content"] += event["content"]
                    render_assistant_text(text_area, assistant["content"])
    except requests.exceptions.ConnectionError:
        assistant["error"] = "Cannot connect to backend. Make sure the backend is running on port 8000."
    except requests.exceptions.Timeout:
        assistant["error"] = "Request timed out. Please try again."
    except requests.exceptions.RequestException as e:
        assistant["error"] = f"An error occurred: {str(e)}"

    if not assistant["content"] and not assistant["places"] and not assistant["error"]:
        assistant["content"] = "I couldn't find anything for that request."
    return assistant

# Header
st.markdown('<div class="main-header">📍 MapChat</div>', unsafe_allow_html=True)
st.markdown("<p style='text-align: center; color: #666;'>Ask for places and get a map with a short answer</p>", unsafe_allow_html=True)

# Sidebar
with st.sidebar:
    st.header("⚙️ Settings")

    backend_status = check_backend_health()
    if backend_status:
        st.markdown('<div class="success-box">✅ Backend Connected</div>', unsafe_allow_html=True)
    else:
        st.warning("Backend Disconnected. Run `python run.py` in the backend folder.")

    st.divider()

    st.subheader("🧭 Your Location")
    st.session_state.use_location = st.checkbox("Use my location for distances", value=st.session_state.use_location)
    user_lat = st.number_input("Latitude", value=25.0330, min_value=-90.0, max_value=90.0, format="%.4f",
                               disabled=not st.session_state.use_location)
    user_lng = st.number_input("Longitude", value=121.5654, min_value=-180.0, max_value=180.0, format="%.4f",
                               disabled=not st.session_state.use_location)

    st.divider()

    st.write(f"**Messages:** {len(st.session_state.chat_history)}")
    if st.button("🔄 New Chat"):
        st.session_state.chat_history = []
        st.rerun()

    st.divider()

    st.subheader("💡 Try These Examples")
    example_queries = [
        "find a coffee shop near Taipei 101",
        "good beef noodles around here",
        "gas stations nearby",
        "restaurants in San Francisco",
    ]
    for query in example_queries:
        if st.button(query, key=f"example_{query[:20]}", use_container_width=True):
            st.session_state.pending_query = query
            st.rerun()

# Main chat interface
if not backend_status:
    st.warning("⚠️ Backend is not running. Please start the backend server first.")
    st.code("cd backend && python run.py", language="bash")
else:
    for message in st.session_state.chat_history:
        display_message(message)

    st.divider()

    if "pending_query" in st.session_state:
        user_input = st.session_state.pending_query
        del st.session_state.pending_query
    else:
        user_input = st.chat_input("Ask me about places nearby...")

    if user_input:
        st.session_state.chat_history.append({
            "role": "user",
            "content": user_input,
            "timestamp": datetime.now().isoformat()
        })
        display_message(st.session_state.chat_history[-1])

        location = {"lat": user_lat, "lng": user_lng} if st.session_state.use_location else None
        st.session_state.chat_history.append(run_turn(location))
        st.rerun()

# Footer
st.divider()
st.markdown("""
<div style='text-align: center; color: #999; padding: 1rem;'>
    <small>Powered by FastAPI, Ollama & Google Maps | Made with ❤️ using Streamlit</small>
</div>
""", unsafe_allow_html=True)
