"""Tests for async_upnp_bindgen."""
