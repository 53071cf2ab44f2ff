"""
                        Services Module

External collaborators with the hybrid architecture pattern: each
service has a development implementation and a production one, picked
by ENV_MODE.

Services:
    - catalog: categories, menu items, orders and settings (memory / HTTP)
    - notifications: customer SMS (mock / Twilio)
"""
