from tcgbridge.search.pokemon_tcg import PokemonTcgClient, card_to_record

__all__ = [
    "PokemonTcgClient",
    "card_to_record",
]
