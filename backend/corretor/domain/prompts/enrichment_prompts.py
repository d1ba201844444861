"""
PROMPTS DE ENRIQUECIMENTO DE IMÓVEIS
====================================

Usados pelo gpt-4o-mini (JSON mode, temperature 0) para extrair dados
estruturados de títulos e descrições importados dos portais.
"""

from typing import Any

ENRICHMENT_SYSTEM_PROMPT = """Você é um especialista em análise de imóveis brasileiros.
Extraia dados estruturados de listagens de imóveis com precisão.
Retorne APENAS JSON válido, sem explicações adicionais."""

NEIGHBORHOOD_SYSTEM_PROMPT = (
    "Você é um especialista em imóveis brasileiros. Extraia nomes de bairros com precisão."
)


def _value(value: Any) -> str:
    return value or "N/A"


def build_enrichment_prompt(prop: Any) -> str:
    """Prompt de extração completa (tipo, modalidade, valores, features, resumo)."""
    return f"""Analise esta listagem de imóvel e extraia dados estruturados:

TÍTULO: {_value(prop.title)}

DESCRIÇÃO: {_value(prop.description)}

CIDADE: {_value(prop.address_city)}
ESTADO: {_value(prop.address_state)}

Extraia e retorne um JSON com os seguintes campos:

{{
  "property_type": "apartamento|casa|sobrado|sala_comercial|terreno|fazenda_sitio_chacara|loft|cobertura|null",
  "listing_type": "rent|sale|null",
  "bedrooms": number ou null,
  "bathrooms": number ou null,
  "suites": number ou null (quartos com banheiro privativo),
  "parking_spaces": number ou null (vagas de garagem),
  "price_monthly": number ou null (aluguel mensal em reais),
  "price_total": number ou null (preço de venda em reais),
  "condominium_fee": number ou null (taxa de condomínio mensal),
  "iptu_monthly": number ou null (IPTU mensal),
  "iptu_annual": number ou null (IPTU anual),
  "address_neighborhood": "nome do bairro" ou null,
  "furnished": "furnished|unfurnished|semi_furnished|null",
  "features": ["feature1", "feature2", ...] (array de características),
  "ai_summary": "Resumo de 2-3 frases em português descrevendo o imóvel"
}}

REGRAS IMPORTANTES:
1. Se um campo não estiver claramente mencionado, use null
2. Para property_type, escolha a categoria mais específica
3. Para listing_type: "rent" se mencionar aluguel/locação, "sale" se mencionar venda/compra
4. Preços devem ser apenas números (sem R$, pontos ou vírgulas)
5. Features devem ser características importantes (piscina, academia, churrasqueira, etc.)
6. O ai_summary deve ser objetivo e destacar os principais atrativos
7. Se o título mencionar "para alugar" ou "locação", é rent
8. Se o título mencionar "venda" ou "compra", é sale
9. Extraia o bairro do título ou descrição se possível

Retorne APENAS o JSON, sem texto adicional."""


def build_neighborhood_prompt(prop: Any) -> str:
    """Prompt focado só no bairro (rua e CEP ajudam na inferência)."""
    return f"""Analise esta listagem de imóvel e extraia APENAS o nome do bairro:

TÍTULO: {prop.title}
DESCRIÇÃO: {_value(prop.description)}
RUA: {_value(prop.address_street)}
NÚMERO: {_value(prop.address_number)}
CEP: {_value(prop.address_zipcode)}
CIDADE: {_value(prop.address_city)}
ESTADO: {_value(prop.address_state)}

Retorne um JSON com:
{{
  "neighborhood": "nome do bairro" ou null,
  "confidence": "high|medium|low"
}}

REGRAS IMPORTANTES:
1. PRIORIDADE 1: Use o nome da rua (address_street) para identificar o bairro conhecido em Jundiaí
2. PRIORIDADE 2: Procure por menções explícitas de bairro no título ou descrição
3. Exemplos de bairros em Jundiaí: "Centro", "Vila Arens", "Jardim Ana Estela", "Anhangabaú", "Vila Hortolândia", "Engordadouro", "Malota"
4. Se mencionar apenas "região central" ou "centro", use "Centro" como bairro
5. Use seu conhecimento de ruas de Jundiaí para identificar o bairro pela rua
6. Se tiver CEP, use-o para ajudar a identificar o bairro
7. confidence = "high" se o bairro é mencionado explicitamente ou se a rua é bem conhecida
8. confidence = "medium" se for inferido de contexto ou conhecimento da rua
9. confidence = "low" se houver dúvida ou informação insuficiente

Retorne APENAS o JSON, sem texto adicional."""
