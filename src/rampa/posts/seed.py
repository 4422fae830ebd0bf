"""Demonstration posts written once into an empty store."""

from __future__ import annotations

from datetime import UTC, datetime

from rampa.posts.models import Coordinates, Post


def seed_posts() -> list[Post]:
    """Fresh copies of the demo dataset."""
    return [
        Post(
            id="seed-1",
            title="Rampa na entrada da biblioteca",
            description=(
                "Rampa com corrimão dos dois lados e inclinação suave. "
                "Piso antiderrapante."
            ),
            accessibility_tags=["Rampa"],
            location_name="Biblioteca Municipal",
            street_name="Rua das Flores, 120",
            coordinates=Coordinates(latitude=-23.5505, longitude=-46.6333),
            created_at=datetime(2024, 3, 4, 14, 30, tzinfo=UTC),
        ),
        Post(
            id="seed-2",
            title="Elevador fora de serviço na estação",
            description=(
                "O elevador da plataforma 2 está parado há uma semana. "
                "Só é possível acessar pela escada."
            ),
            accessibility_tags=["Elevador"],
            location_name="Estação Central",
            street_name="Avenida Brasil, 900",
            coordinates=Coordinates(latitude=-23.5489, longitude=-46.6388),
            created_at=datetime(2024, 3, 10, 9, 15, tzinfo=UTC),
        ),
        Post(
            id="seed-3",
            title="Banheiro acessível no shopping",
            description=(
                "Banheiro amplo, com barras de apoio e pia na altura certa. "
                "Fica no segundo piso, ao lado da praça de alimentação."
            ),
            accessibility_tags=["Banheiro Acessível", "Elevador"],
            location_name="Shopping Centro",
            created_at=datetime(2024, 3, 12, 18, 0, tzinfo=UTC),
        ),
        Post(
            id="seed-4",
            title="Piso tátil até a bilheteria",
            description=(
                "Piso tátil contínuo da calçada até o guichê de atendimento."
            ),
            accessibility_tags=["Piso tátil"],
            location_name="Teatro Municipal",
            street_name="Praça Ramos de Azevedo",
            created_at=datetime(2024, 2, 20, 20, 45, tzinfo=UTC),
        ),
    ]
