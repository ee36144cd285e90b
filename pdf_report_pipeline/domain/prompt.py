"""Prompt template for structured report generation.

The report is written for downstream retrieval (RAG) agents: it must keep
every useful fact, stay free of interpretation, and cite its source document
at the end of each major section.
"""

REPORT_PROMPT_TEMPLATE = """\
Tu es un assistant d'analyse expert.
Ta mission : produire un rapport complet, clair et structuré à partir du contenu du document fourni. Le nom du document est : "{file_name}".

Objectif :
- Synthétiser l'ensemble des informations clés issues de la source sans en omettre.
- Chaque donnée importante doit apparaître, même si elle ne se répète qu'une fois dans la source.

Structure demandée :
1.  **Résumé global** : les grandes tendances et faits majeurs.
2.  **Synthèse détaillée** : faits essentiels, chiffres, idées clés, structurés par thèmes.
3.  **Points à retenir / données critiques** : une liste à puces des informations les plus cruciales.

Contraintes :
- Le rapport doit être exploitable par un système RAG.
- Garde un niveau de détail élevé, mais regroupe les éléments proches pour éviter la redondance.
- Ne supprime aucune donnée utile, mais exprime-les sous forme condensée si nécessaire.
- Référence la source de façon brève à la fin de chaque section majeure : (source : {file_name}).
- Aucune interprétation ni jugement, uniquement des faits contextualisés.

Finalité :
Le texte doit pouvoir être utilisé par des agents IA pour répondre à des requêtes internes avec contexte complet et traçabilité.

---
CONTENU DU DOCUMENT "{file_name}":
---

{document_text}
"""


def build_report_prompt(document_text: str, file_name: str) -> str:
    """Render the report prompt for one document.

    Args:
        document_text: Plain text extracted from the document.
        file_name: Document name, used as the report's source reference.

    Returns:
        Prompt string ready to send as a single user message.
    """
    return REPORT_PROMPT_TEMPLATE.format(
        file_name=file_name, document_text=document_text
    )
