from fastapi import Request

from sortie.core.config import settings

LANGUAGES = ("en", "fr")
LANGUAGE_COOKIE = "lang"

TRANSLATIONS = {
    "en": {
        "nav.home": "Home",
        "nav.voyages": "Voyages",
        "nav.booking": "Booking",
        "nav.portfolio": "Portfolio",
        "nav.gallery": "Gallery",
        "nav.admin": "Admin",

        "home.hero.title": "Discover Algeria's Hidden Treasures",
        "home.hero.subtitle": "Exclusive travel experiences curated for the adventurous soul",
        "home.hero.cta": "Explore Our Voyages",
        "home.instagram": "Follow Our Journey",

        "voyages.title": "Our Exclusive Voyages",
        "voyages.search": "Search destinations...",
        "voyages.filter.all": "All Regions",
        "voyages.duration": "Duration",
        "voyages.pickup": "Pickup Point",
        "voyages.book": "Book Now",
        "voyages.days": "days",

        "booking.title": "Book Your Adventure",
        "booking.name": "Full Name",
        "booking.phone": "Phone Number",
        "booking.email": "Email Address",
        "booking.trip": "Select Trip",
        "booking.people": "Number of People",
        "booking.pickup": "Pickup Point",
        "booking.notes": "Additional Notes",
        "booking.coupon": "Coupon Code",
        "booking.total": "Total",
        "booking.submit": "Submit Booking",
        "booking.currency": "DZD",

        "portfolio.title": "Portfolio & Gallery",
        "portfolio.subtitle": "Memories from our exclusive adventures",

        "admin.title": "Admin Dashboard",
        "admin.login": "Login",
        "admin.logout": "Logout",
        "admin.trips": "Manage Trips",
        "admin.bookings": "View Bookings",
        "admin.gallery": "Manage Gallery",
        "admin.coupons": "Manage Coupons",
        "admin.sheets": "Google Sheets",
        "admin.export": "Export CSV",
    },
    "fr": {
        "nav.home": "Accueil",
        "nav.voyages": "Voyages",
        "nav.booking": "Réservation",
        "nav.portfolio": "Portfolio",
        "nav.gallery": "Galerie",
        "nav.admin": "Admin",

        "home.hero.title": "Découvrez les Trésors Cachés de l'Algérie",
        "home.hero.subtitle": "Expériences de voyage exclusives pour les âmes aventureuses",
        "home.hero.cta": "Explorer Nos Voyages",
        "home.instagram": "Suivez Notre Voyage",

        "voyages.title": "Nos Voyages Exclusifs",
        "voyages.search": "Rechercher des destinations...",
        "voyages.filter.all": "Toutes les Régions",
        "voyages.duration": "Durée",
        "voyages.pickup": "Point de Ramassage",
        "voyages.book": "Réserver",
        "voyages.days": "jours",

        "booking.title": "Réservez Votre Aventure",
        "booking.name": "Nom Complet",
        "booking.phone": "Numéro de Téléphone",
        "booking.email": "Adresse Email",
        "booking.trip": "Sélectionner le Voyage",
        "booking.people": "Nombre de Personnes",
        "booking.pickup": "Point de Ramassage",
        "booking.notes": "Notes Supplémentaires",
        "booking.coupon": "Code Promo",
        "booking.total": "Total",
        "booking.submit": "Soumettre la Réservation",
        "booking.currency": "DZD",

        "portfolio.title": "Portfolio et Galerie",
        "portfolio.subtitle": "Souvenirs de nos aventures exclusives",

        "admin.title": "Tableau de Bord Admin",
        "admin.login": "Connexion",
        "admin.logout": "Déconnexion",
        "admin.trips": "Gérer les Voyages",
        "admin.bookings": "Voir les Réservations",
        "admin.gallery": "Gérer la Galerie",
        "admin.coupons": "Gérer les Coupons",
        "admin.sheets": "Google Sheets",
        "admin.export": "Exporter CSV",
    },
}


def get_language(request: Request) -> str:
    lang = request.cookies.get(LANGUAGE_COOKIE)
    if lang in LANGUAGES:
        return lang
    return settings.DEFAULT_LANGUAGE


def translate(lang: str, key: str) -> str:
    # unknown keys render as themselves
    return TRANSLATIONS.get(lang, {}).get(key, key)


def translator(lang: str):
    return lambda key: translate(lang, key)
