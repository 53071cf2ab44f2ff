"""
Sample menu used to seed development catalogs.

Item ingredient lists use the legacy free-text form, some carrying a
"(+$N)" price marker.
"""

IMAGE = "https://images.unsplash.com/photo-{}?ixlib=rb-4.0.3&auto=format&fit=crop&w=800&h=600"

SAMPLE_CATEGORIES = [
    {
        "name": "tacos",
        "translation": "Tacos",
        "icon": "food",
        "order": 0,
        "ingredients": [
            {"id": "onion", "name": "Cebolla (Onions)", "isDefault": True, "price": "0.00"},
            {"id": "cilantro", "name": "Cilantro", "isDefault": True, "price": "0.00"},
            {"id": "queso", "name": "Queso Fresco", "isDefault": False, "price": "1.00"},
            {"id": "guac", "name": "Guacamole", "isDefault": False, "price": "2.00"},
        ],
    },
    {
        "name": "burritos",
        "translation": "Burritos",
        "icon": "food",
        "order": 1,
        "ingredients": [
            {"id": "rice", "name": "Rice", "isDefault": True, "price": "0.00"},
            {"id": "beans", "name": "Black Beans", "isDefault": True, "price": "0.00"},
            {"id": "sour-cream", "name": "Sour Cream", "isDefault": False, "price": "1.00"},
            {"id": "guac", "name": "Guacamole", "isDefault": False, "price": "2.00"},
        ],
    },
    {"name": "tortas", "translation": "Tortas", "icon": "food", "order": 2, "ingredients": []},
    {"name": "semitas", "translation": "Semitas", "icon": "food", "order": 3, "ingredients": []},
    {"name": "bebidas", "translation": "Drinks", "icon": "drink", "order": 4, "ingredients": []},
]

SAMPLE_MENU_ITEMS = [
    # TACOS
    {
        "name": "De Al Pastor",
        "translation": "Al Pastor Tacos",
        "category": "tacos",
        "price": "13.99",
        "description": "Three soft corn tortillas with marinated pork, pineapple, and onions",
        "image": IMAGE.format("1551504734-5ee1c4a1479b"),
        "meats": ["Al Pastor", "Carne Asada", "Carnitas", "Pollo"],
        "ingredients": ["Cebolla (Onions)", "Cilantro", "Piña (Pineapple)", "Salsa Verde", "Salsa Roja", "Lime"],
    },
    {
        "name": "De Pescado",
        "translation": "Fish Tacos",
        "category": "tacos",
        "price": "14.99",
        "description": "Three soft flour tortillas with grilled tilapia and cabbage slaw",
        "image": IMAGE.format("1578662996442-48f60103fc96"),
        "meats": ["Pescado (Fish)", "Camarón (Shrimp)"],
        "ingredients": ["Cabbage Slaw", "Pico de Gallo", "Crema", "Lime", "Chipotle Mayo"],
    },
    # BURRITOS
    {
        "name": "Burrito de Carne Asada",
        "translation": "Grilled Beef Burrito",
        "category": "burritos",
        "price": "13.99",
        "description": "Large flour tortilla with marinated grilled beef, rice, beans, and fresh ingredients",
        "image": IMAGE.format("1566740933430-b5e70b06d2d5"),
        "meats": ["Carne Asada", "Al Pastor", "Carnitas", "Pollo"],
        "ingredients": ["Rice", "Black Beans", "Cheese", "Sour Cream (+$1)", "Guacamole (+$2)", "Lettuce"],
    },
    {
        "name": "Burrito Vegetariano",
        "translation": "Vegetarian Burrito",
        "category": "burritos",
        "price": "10.99",
        "description": "Large flour tortilla packed with rice, beans, vegetables, and cheese",
        "image": IMAGE.format("1574343635717-1348761c0d64"),
        "ingredients": ["Rice", "Black Beans", "Cheese", "Sour Cream (+$1)", "Guacamole (+$2)", "Bell Peppers"],
    },
    # TORTAS
    {
        "name": "Torta de Milanesa",
        "translation": "Breaded Steak Sandwich",
        "category": "tortas",
        "price": "12.99",
        "description": "Mexican sandwich with breaded and fried steak on fresh bolillo bread",
        "image": IMAGE.format("1619740455993-8c2b8078c3cf"),
        "meats": ["Milanesa (Breaded Steak)", "Carnitas", "Pollo"],
        "ingredients": ["Beans", "Avocado", "Lettuce", "Tomato", "Pickled Jalapeños", "Mayo", "Oaxaca Cheese"],
    },
    {
        "name": "Torta de Pollo",
        "translation": "Chicken Sandwich",
        "category": "tortas",
        "price": "11.99",
        "description": "Mexican sandwich with seasoned grilled chicken and fresh toppings",
        "image": IMAGE.format("1594212699903-ec8a3eca50f5"),
        "meats": ["Pollo", "Carnitas", "Al Pastor"],
        "ingredients": ["Beans", "Avocado", "Lettuce", "Tomato", "Mayo", "Chipotle Mayo (+$0.50)"],
    },
    # SEMITAS
    {
        "name": "Semita de Al Pastor",
        "translation": "Al Pastor Semita",
        "category": "semitas",
        "price": "10.99",
        "description": "Mexican-style sandwich with marinated pork and pineapple",
        "image": IMAGE.format("1615870216519-2f9fa2adf101"),
        "meats": ["Al Pastor", "Carnitas", "Pollo"],
        "ingredients": ["Beans", "Avocado", "Pineapple", "Pickled Jalapeños", "Lettuce", "Mayo"],
    },
    # BEBIDAS
    {
        "name": "Agua de Horchata",
        "translation": "Horchata",
        "category": "bebidas",
        "price": "4.99",
        "description": "Creamy rice and cinnamon beverage, a Mexican favorite",
        "image": IMAGE.format("1571115764595-644a1f56a55c"),
        "sizes": ["Small", "Medium", "Large"],
    },
    {
        "name": "Coca-Cola Mexicana",
        "translation": "Mexican Coca-Cola",
        "category": "bebidas",
        "price": "3.49",
        "description": "Authentic Mexican Coca-Cola made with cane sugar in glass bottles",
        "image": IMAGE.format("1561758033-48d52648ae8b"),
        "sizes": ["Bottle"],
    },
]
