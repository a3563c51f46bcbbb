"""Controlled vocabularies of the exercise dataset, translated to pt-BR."""
from typing import Dict, Optional

BODY_PART_TRANSLATIONS: Dict[str, str] = {
    "back": "Costas",
    "cardio": "Cardio",
    "chest": "Peito",
    "lower arms": "Antebraços",
    "lower legs": "Panturrilhas",
    "neck": "Pescoço",
    "shoulders": "Ombros",
    "upper arms": "Braços",
    "upper legs": "Pernas",
    "waist": "Abdômen",
}

EQUIPMENT_TRANSLATIONS: Dict[str, str] = {
    "assisted": "Assistido",
    "band": "Elástico",
    "barbell": "Barra",
    "body weight": "Peso Corporal",
    "bosu ball": "Bola Bosu",
    "cable": "Cabo",
    "dumbbell": "Haltere",
    "elliptical machine": "Elíptico",
    "ez barbell": "Barra EZ",
    "hammer": "Martelo",
    "kettlebell": "Kettlebell",
    "leverage machine": "Máquina de Alavanca",
    "medicine ball": "Bola Medicinal",
    "olympic barbell": "Barra Olímpica",
    "resistance band": "Faixa de Resistência",
    "roller": "Rolo",
    "rope": "Corda",
    "skierg machine": "Máquina SkiErg",
    "sled machine": "Máquina de Trenó",
    "smith machine": "Smith Machine",
    "stability ball": "Bola de Estabilidade",
    "stationary bike": "Bicicleta Ergométrica",
    "stepmill machine": "Máquina Step",
    "tire": "Pneu",
    "trap bar": "Barra Trap",
    "upper body ergometer": "Ergômetro Superior",
    "weighted": "Com Peso",
    "wheel roller": "Roda",
}

TARGET_TRANSLATIONS: Dict[str, str] = {
    "abs": "Abdominais",
    "adductors": "Adutores",
    "abductors": "Abdutores",
    "biceps": "Bíceps",
    "calves": "Panturrilhas",
    "cardiovascular system": "Sistema Cardiovascular",
    "delts": "Deltoides",
    "forearms": "Antebraços",
    "glutes": "Glúteos",
    "hamstrings": "Posteriores",
    "lats": "Dorsais",
    "levator scapulae": "Elevador da Escápula",
    "pectorals": "Peitorais",
    "quads": "Quadríceps",
    "serratus anterior": "Serrátil Anterior",
    "spine": "Coluna",
    "traps": "Trapézio",
    "triceps": "Tríceps",
    "upper back": "Costas Superior",
}


def _translate(table: Dict[str, str], value: Optional[str]) -> str:
    """Case-insensitive lookup; unknown values pass through trimmed."""
    text = (value or "").strip()
    return table.get(text.lower(), text)


def translate_body_part(value: Optional[str]) -> str:
    return _translate(BODY_PART_TRANSLATIONS, value)


def translate_equipment(value: Optional[str]) -> str:
    return _translate(EQUIPMENT_TRANSLATIONS, value)


def translate_target(value: Optional[str]) -> str:
    return _translate(TARGET_TRANSLATIONS, value)
