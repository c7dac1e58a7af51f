# src/campaign_engine/core/__init__.py
