#!/usr/bin/env python3
"""Configuration for the shipping service

Configuration hierarchy:
- shipping_config: HTTP bind address, Kafka channels, NATS side-channel
- logging_config: Logging configuration

An optional env file per environment is loaded first; real environment
variables always win.
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .shipping_config import ShippingConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = ShippingConfig.from_env()

def get_settings() -> ShippingConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> ShippingConfig:
    """Reload settings from environment"""
    global settings
    settings = ShippingConfig.from_env()
    return settings

__all__ = [
    'ShippingConfig',
    'LoggingConfig',
    'get_settings',
    'reload_settings',
    'settings',
]
