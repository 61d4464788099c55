from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

# Soglia minima di similarità per il match fuzzy (strettamente maggiore)
SIMILARITY_THRESHOLD = 0.7
CONTAINMENT_SCORE = 0.8

# Varianti dei nomi squadra tra football-data.org e i provider di quote.
DEFAULT_TEAM_ALIASES: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        # Premier League
        "Arsenal FC": ("Arsenal",),
        "Chelsea FC": ("Chelsea",),
        "Liverpool FC": ("Liverpool",),
        "Manchester City FC": ("Manchester City", "Man City"),
        "Manchester United FC": ("Manchester United", "Man United", "Man Utd"),
        "Tottenham Hotspur FC": ("Tottenham", "Spurs"),
        "Newcastle United FC": ("Newcastle United", "Newcastle"),
        "Brighton & Hove Albion FC": ("Brighton", "Brighton & Hove Albion"),
        "West Ham United FC": ("West Ham United", "West Ham"),
        "Aston Villa FC": ("Aston Villa",),
        "Crystal Palace FC": ("Crystal Palace",),
        "Fulham FC": ("Fulham",),
        "Wolverhampton Wanderers FC": ("Wolves", "Wolverhampton"),
        "Everton FC": ("Everton",),
        "Brentford FC": ("Brentford",),
        "Nottingham Forest FC": ("Nottingham Forest", "Nott'm Forest"),
        "Luton Town FC": ("Luton Town", "Luton"),
        "Burnley FC": ("Burnley",),
        "Sheffield United FC": ("Sheffield United", "Sheffield Utd"),
        "AFC Bournemouth": ("Bournemouth",),
        # La Liga
        "Real Madrid CF": ("Real Madrid",),
        "FC Barcelona": ("Barcelona",),
        "Atlético de Madrid": ("Atletico Madrid", "Atlético Madrid"),
        "Sevilla FC": ("Sevilla",),
        "Real Sociedad de Fútbol": ("Real Sociedad",),
        "Real Betis Balompié": ("Real Betis",),
        "Villarreal CF": ("Villarreal",),
        "Athletic Bilbao": ("Athletic Club",),
        "Valencia CF": ("Valencia",),
        "RC Celta de Vigo": ("Celta Vigo",),
        "RCD Espanyol de Barcelona": ("Espanyol",),
        "Getafe CF": ("Getafe",),
        "CA Osasuna": ("Osasuna",),
        "Rayo Vallecano de Madrid": ("Rayo Vallecano",),
        "Deportivo Alavés": ("Alaves",),
        "Cádiz CF": ("Cadiz",),
        "RCD Mallorca": ("Mallorca",),
        "UD Las Palmas": ("Las Palmas",),
        "Girona FC": ("Girona",),
        "UD Almería": ("Almeria",),
        # Bundesliga
        "FC Bayern München": ("Bayern Munich", "Bayern München"),
        "Borussia Dortmund": ("Dortmund",),
        "RB Leipzig": ("Leipzig",),
        "Bayer 04 Leverkusen": ("Bayer Leverkusen",),
        "Eintracht Frankfurt": ("Frankfurt",),
        "Borussia Mönchengladbach": ("Monchengladbach", "M'gladbach"),
        "VfL Wolfsburg": ("Wolfsburg",),
        "SC Freiburg": ("Freiburg",),
        "TSG 1899 Hoffenheim": ("Hoffenheim",),
        "FC Augsburg": ("Augsburg",),
        "VfB Stuttgart": ("Stuttgart",),
        "1. FC Union Berlin": ("Union Berlin",),
        "Hertha BSC": ("Hertha Berlin",),
        "FC Schalke 04": ("Schalke",),
        "Werder Bremen": ("Bremen",),
        "1. FC Köln": ("FC Koln", "Cologne"),
        "VfL Bochum 1848": ("Bochum",),
        "FSV Mainz 05": ("Mainz",),
        # Serie A
        "Juventus FC": ("Juventus",),
        "AC Milan": ("Milan",),
        "FC Internazionale Milano": ("Inter Milan", "Inter"),
        "SSC Napoli": ("Napoli",),
        "AS Roma": ("Roma",),
        "SS Lazio": ("Lazio",),
        "Atalanta BC": ("Atalanta",),
        "ACF Fiorentina": ("Fiorentina",),
        "Torino FC": ("Torino",),
        "Bologna FC 1909": ("Bologna",),
        "UC Sampdoria": ("Sampdoria",),
        "Genoa CFC": ("Genoa",),
        "Udinese Calcio": ("Udinese",),
        "US Sassuolo Calcio": ("Sassuolo",),
        "Hellas Verona FC": ("Hellas Verona", "Verona"),
        "Cagliari Calcio": ("Cagliari",),
        "US Lecce": ("Lecce",),
        "Empoli FC": ("Empoli",),
        "AC Monza": ("Monza",),
        "Frosinone Calcio": ("Frosinone",),
        # Ligue 1
        "Paris Saint-Germain FC": ("Paris Saint Germain", "PSG"),
        "Olympique de Marseille": ("Marseille",),
        "Olympique Lyonnais": ("Lyon",),
        "AS Monaco FC": ("Monaco",),
        "OGC Nice": ("Nice",),
        "Stade Rennais FC 1901": ("Rennes",),
        "RC Lens": ("Lens",),
        "LOSC Lille": ("Lille",),
        "Stade de Reims": ("Reims",),
        "FC Nantes": ("Nantes",),
        "Montpellier HSC": ("Montpellier",),
        "RC Strasbourg Alsace": ("Strasbourg",),
        "Le Havre AC": ("Le Havre",),
        "FC Metz": ("Metz",),
        "Stade Brestois 29": ("Brest",),
        "Clermont Foot 63": ("Clermont",),
        "FC Lorient": ("Lorient",),
        "Toulouse FC": ("Toulouse",),
    }
)


def _key(name: str) -> str:
    return name.strip().lower()


class TeamAliasTable:
    """
    Tabella alias immutabile: canonico -> varianti e variante -> canonico.
    Le chiavi di lookup sono minuscole e senza spazi ai bordi.
    """

    def __init__(self, aliases: Mapping[str, Iterable[str]]) -> None:
        forward: Dict[str, Tuple[str, ...]] = {}
        reverse: Dict[str, str] = {}
        for canonical, variants in aliases.items():
            canonical = canonical.strip()
            forward[canonical] = tuple(v.strip() for v in variants)
            for variant in forward[canonical]:
                reverse[_key(variant)] = canonical
            reverse[_key(canonical)] = canonical
        self._forward = MappingProxyType(forward)
        self._reverse = MappingProxyType(reverse)

    @classmethod
    def default(cls) -> "TeamAliasTable":
        return cls(DEFAULT_TEAM_ALIASES)

    def canonical(self, name: str) -> Optional[str]:
        return self._reverse.get(_key(name))

    def variants(self, canonical: str) -> Tuple[str, ...]:
        return self._forward.get(canonical.strip(), ())

    def __len__(self) -> int:
        return len(self._forward)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._reverse


class NameNormalizer:
    """
    Canonicalizza e confronta nomi squadra provenienti da sorgenti diverse.

    match(): prima il confronto esatto sulla forma canonica, poi il miglior
    punteggio di similarità (uguaglianza 1.0, contenimento 0.8, altrimenti
    1 - levenshtein/len_max) purché > 0.7. A parità vince il primo candidato.
    """

    def __init__(self, table: Optional[TeamAliasTable] = None) -> None:
        self.table = table if table is not None else TeamAliasTable.default()

    def normalize(self, name: str) -> str:
        stripped = name.strip()
        return self.table.canonical(stripped) or stripped

    @staticmethod
    def similarity(a: str, b: str) -> float:
        s1 = a.strip().lower()
        s2 = b.strip().lower()
        if s1 == s2:
            return 1.0
        if s1 in s2 or s2 in s1:
            return CONTAINMENT_SCORE
        longest = max(len(s1), len(s2))
        if longest == 0:
            return 0.0
        return 1 - (Levenshtein.distance(s1, s2) / longest)

    def match(self, source: str, candidates: Sequence[str]) -> Optional[str]:
        canonical_source = self.normalize(source)
        for candidate in candidates:
            if self.normalize(candidate) == canonical_source:
                return candidate

        best: Optional[str] = None
        best_score = 0.0
        for candidate in candidates:
            score = self.similarity(source, candidate)
            if score > best_score and score > SIMILARITY_THRESHOLD:
                best, best_score = candidate, score
        return best


_default_normalizer = NameNormalizer()


def normalize_team_name(name: str) -> str:
    return _default_normalizer.normalize(name)


def find_team_match(source: str, candidates: Sequence[str]) -> Optional[str]:
    return _default_normalizer.match(source, candidates)


__all__ = [
    "DEFAULT_TEAM_ALIASES",
    "SIMILARITY_THRESHOLD",
    "TeamAliasTable",
    "NameNormalizer",
    "normalize_team_name",
    "find_team_match",
]
