import re

SPECIAL_CHARS = r'[!@#$%^&*()_+\-=\[\]{};:\'\"\\|,.<>\/?]'


def validate_password_strength(v: str) -> str:
    if not re.search(r'[A-Z]', v):
        raise ValueError('Le mot de passe doit contenir au moins une majuscule')
    if not re.search(r'[a-z]', v):
        raise ValueError('Le mot de passe doit contenir au moins une minuscule')
    if not re.search(r'\d', v):
        raise ValueError('Le mot de passe doit contenir au moins un chiffre')
    if not re.search(SPECIAL_CHARS, v):
        raise ValueError('Le mot de passe doit contenir au moins un caractère spécial')
    return v


def email_local_part(email: str) -> str:
    """Nom d'affichage par défaut: la partie avant '@' de l'email."""
    return (email or "").strip().split("@")[0]
