"""
                Taqueria Ordering System

Restaurant ordering backend and menu-management core: categorized menu,
item customization and pricing, staged menu editing, category and item
ordering, and the order status lifecycle.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
