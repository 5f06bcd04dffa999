"""Reference data for the artisan catalog."""

MEXICAN_STATES: tuple[str, ...] = (
    "Aguascalientes",
    "Baja California",
    "Baja California Sur",
    "Campeche",
    "Chiapas",
    "Chihuahua",
    "Ciudad de México",
    "Coahuila",
    "Colima",
    "Durango",
    "Estado de México",
    "Guanajuato",
    "Guerrero",
    "Hidalgo",
    "Jalisco",
    "Michoacán",
    "Morelos",
    "Nayarit",
    "Nuevo León",
    "Oaxaca",
    "Puebla",
    "Querétaro",
    "Quintana Roo",
    "San Luis Potosí",
    "Sinaloa",
    "Sonora",
    "Tabasco",
    "Tamaulipas",
    "Tlaxcala",
    "Veracruz",
    "Yucatán",
    "Zacatecas",
)

# Longer delivery windows and a shipping surcharge apply here.
REMOTE_STATES: frozenset[str] = frozenset(
    {
        "Baja California",
        "Baja California Sur",
        "Chiapas",
        "Quintana Roo",
        "Yucatán",
        "Sonora",
        "Chihuahua",
    }
)

CATEGORIES: tuple[str, ...] = (
    "Textiles y Ropa",
    "Cerámica y Alfarería",
    "Joyería",
    "Madera y Tallado",
    "Cuero y Piel",
    "Papel y Cartón",
    "Metalistería",
    "Vidrio y Cristal",
)

DEFAULT_PRICE_BOUNDS: tuple[float, float] = (0, 10000)
