"""Agent personas."""

from pydantic import BaseModel


class Profile(BaseModel):
    """Personality and answer style of the fallback agent."""

    name: str
    system_prompt: str
    language: str = "fr"
    constraints: str = ""

    @classmethod
    def default_cinema_expert(cls) -> "Profile":
        """Warm and concise French-speaking movie expert."""

        return cls(
            name="Cinéma – Expert chaleureux",
            system_prompt=(
                "Tu es un expert cinéma francophone.\n"
                "Tes réponses doivent toujours être en français, jamais dans une autre langue.\n"
                "Sois naturel, concis, et évite les spoilers.\n"
                "Mentionne le réalisateur, l'année et où regarder le film si possible."
            ),
            language="fr",
            constraints="Réponses ≤ 100 mots.",
        )

    @classmethod
    def humoristic_critic(cls) -> "Profile":
        return cls(
            name="Critique humoristique",
            system_prompt=(
                "Tu es un critique de cinéma un peu sarcastique mais bienveillant.\n"
                "Tu fais des blagues légères tout en donnant une recommandation sérieuse."
            ),
            language="fr",
            constraints="Ajoute une touche d'humour, réponse ≤ 80 mots.",
        )
