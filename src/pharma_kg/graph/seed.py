"""
Curated seed knowledge.

Drugs, indications, relationships and competitive landscapes loaded into every
new graph by ``build_seed_graph``. Indication aliases carry common synonyms
and MeSH headings. Seed data is trusted: a validation failure here is a
programming error and propagates.
"""

import logging

from pharma_kg.config import Settings
from pharma_kg.graph.models import EntityKind, EntitySpec, RelationshipType
from pharma_kg.graph.store import KnowledgeGraph

logger = logging.getLogger(__name__)

SEED_SOURCE = "curated_seed"

SEED_DRUGS: list[dict] = [
    # Analgesics / NSAIDs
    {
        "name": "Aspirin",
        "aliases": ["acetylsalicylic acid", "ASA", "Bayer Aspirin"],
        "mechanism": "COX inhibitor",
        "therapeutic_areas": ["pain", "cardiovascular"],
        "modality": "small molecule",
        "company": "Bayer",
        "competitors": ["Ibuprofen", "Acetaminophen"],
    },
    {
        "name": "Ibuprofen",
        "aliases": ["Advil", "Motrin"],
        "mechanism": "COX inhibitor",
        "therapeutic_areas": ["pain", "inflammation"],
        "modality": "small molecule",
        "company": "Haleon",
        "competitors": ["Naproxen", "Acetaminophen", "Aspirin"],
    },
    {
        "name": "Naproxen",
        "aliases": ["Aleve", "Naprosyn"],
        "mechanism": "COX inhibitor",
        "therapeutic_areas": ["pain", "inflammation"],
        "modality": "small molecule",
        "company": "Bayer",
        "competitors": ["Ibuprofen"],
    },
    {
        "name": "Acetaminophen",
        "aliases": ["paracetamol", "Tylenol", "APAP"],
        "mechanism": "Central prostaglandin synthesis inhibitor",
        "therapeutic_areas": ["pain"],
        "modality": "small molecule",
        "company": "Kenvue",
        "competitors": ["Ibuprofen", "Aspirin"],
    },
    # Diabetes / metabolic
    {
        "name": "Metformin",
        "aliases": ["Glucophage", "metformin hydrochloride"],
        "mechanism": "Biguanide",
        "therapeutic_areas": ["endocrinology", "metabolic"],
        "modality": "small molecule",
        "company": "Bristol Myers Squibb",
        "competitors": ["Sitagliptin", "Empagliflozin", "Semaglutide"],
    },
    {
        "name": "Semaglutide",
        "aliases": ["Ozempic", "Wegovy", "Rybelsus", "NN9535"],
        "mechanism": "GLP-1 receptor agonist",
        "therapeutic_areas": ["endocrinology", "metabolic", "obesity"],
        "modality": "peptide",
        "company": "Novo Nordisk",
        "competitors": ["Tirzepatide", "Liraglutide", "Dulaglutide"],
    },
    {
        "name": "Tirzepatide",
        "aliases": ["Mounjaro", "Zepbound", "LY3298176"],
        "mechanism": "GIP/GLP-1 receptor agonist",
        "therapeutic_areas": ["endocrinology", "metabolic", "obesity"],
        "modality": "peptide",
        "company": "Eli Lilly",
        "competitors": ["Semaglutide", "Dulaglutide"],
    },
    {
        "name": "Liraglutide",
        "aliases": ["Victoza", "Saxenda"],
        "mechanism": "GLP-1 receptor agonist",
        "therapeutic_areas": ["endocrinology", "metabolic", "obesity"],
        "modality": "peptide",
        "company": "Novo Nordisk",
        "competitors": ["Semaglutide", "Dulaglutide"],
    },
    {
        "name": "Dulaglutide",
        "aliases": ["Trulicity", "LY2189265"],
        "mechanism": "GLP-1 receptor agonist",
        "therapeutic_areas": ["endocrinology", "metabolic"],
        "modality": "fusion protein",
        "company": "Eli Lilly",
        "competitors": ["Semaglutide", "Liraglutide"],
    },
    {
        "name": "Empagliflozin",
        "aliases": ["Jardiance", "BI 10773"],
        "mechanism": "SGLT2 inhibitor",
        "therapeutic_areas": ["endocrinology", "cardiovascular", "nephrology"],
        "modality": "small molecule",
        "company": "Boehringer Ingelheim",
        "competitors": ["Sitagliptin"],
    },
    {
        "name": "Sitagliptin",
        "aliases": ["Januvia", "MK-0431"],
        "mechanism": "DPP-4 inhibitor",
        "therapeutic_areas": ["endocrinology", "metabolic"],
        "modality": "small molecule",
        "company": "Merck",
        "competitors": ["Empagliflozin"],
    },
    # Cardiovascular
    {
        "name": "Atorvastatin",
        "aliases": ["Lipitor"],
        "mechanism": "HMG-CoA reductase inhibitor",
        "therapeutic_areas": ["cardiovascular"],
        "modality": "small molecule",
        "company": "Pfizer",
        "competitors": ["Rosuvastatin"],
    },
    {
        "name": "Rosuvastatin",
        "aliases": ["Crestor"],
        "mechanism": "HMG-CoA reductase inhibitor",
        "therapeutic_areas": ["cardiovascular"],
        "modality": "small molecule",
        "company": "AstraZeneca",
        "competitors": ["Atorvastatin"],
    },
    {
        "name": "Lisinopril",
        "aliases": ["Prinivil", "Zestril"],
        "mechanism": "ACE inhibitor",
        "therapeutic_areas": ["cardiovascular"],
        "modality": "small molecule",
        "company": "Merck",
        "competitors": [],
    },
    # Oncology
    {
        "name": "Pembrolizumab",
        "aliases": ["Keytruda", "MK-3475"],
        "mechanism": "PD-1 inhibitor",
        "therapeutic_areas": ["oncology", "immuno-oncology"],
        "modality": "monoclonal antibody",
        "company": "Merck",
        "competitors": ["Nivolumab", "Atezolizumab"],
    },
    {
        "name": "Nivolumab",
        "aliases": ["Opdivo", "BMS-936558"],
        "mechanism": "PD-1 inhibitor",
        "therapeutic_areas": ["oncology", "immuno-oncology"],
        "modality": "monoclonal antibody",
        "company": "Bristol Myers Squibb",
        "competitors": ["Pembrolizumab", "Atezolizumab"],
    },
    {
        "name": "Atezolizumab",
        "aliases": ["Tecentriq", "MPDL3280A"],
        "mechanism": "PD-L1 inhibitor",
        "therapeutic_areas": ["oncology", "immuno-oncology"],
        "modality": "monoclonal antibody",
        "company": "Roche",
        "competitors": ["Pembrolizumab", "Nivolumab"],
    },
    # Immunology
    {
        "name": "Adalimumab",
        "aliases": ["Humira", "D2E7"],
        "mechanism": "TNF-alpha inhibitor",
        "therapeutic_areas": ["immunology", "rheumatology"],
        "modality": "monoclonal antibody",
        "company": "AbbVie",
        "competitors": ["Etanercept", "Upadacitinib"],
    },
    {
        "name": "Etanercept",
        "aliases": ["Enbrel"],
        "mechanism": "TNF-alpha inhibitor",
        "therapeutic_areas": ["immunology", "rheumatology"],
        "modality": "fusion protein",
        "company": "Amgen",
        "competitors": ["Adalimumab"],
    },
    {
        "name": "Upadacitinib",
        "aliases": ["Rinvoq", "ABT-494"],
        "mechanism": "JAK1 inhibitor",
        "therapeutic_areas": ["immunology", "rheumatology"],
        "modality": "small molecule",
        "company": "AbbVie",
        "competitors": ["Adalimumab"],
    },
    # Ophthalmology
    {
        "name": "Aflibercept",
        "aliases": ["Eylea", "VEGF Trap-Eye"],
        "mechanism": "VEGF inhibitor",
        "therapeutic_areas": ["ophthalmology"],
        "modality": "fusion protein",
        "company": "Regeneron",
        "competitors": ["Faricimab", "Ranibizumab"],
    },
    {
        "name": "Ranibizumab",
        "aliases": ["Lucentis"],
        "mechanism": "VEGF-A inhibitor",
        "therapeutic_areas": ["ophthalmology"],
        "modality": "antibody fragment",
        "company": "Genentech",
        "competitors": ["Aflibercept", "Faricimab"],
    },
    {
        "name": "Faricimab",
        "aliases": ["Vabysmo", "RG7716"],
        "mechanism": "Ang-2/VEGF-A bispecific inhibitor",
        "therapeutic_areas": ["ophthalmology"],
        "modality": "bispecific antibody",
        "company": "Roche",
        "competitors": ["Aflibercept", "Ranibizumab"],
    },
]

SEED_INDICATIONS: list[dict] = [
    {"name": "Pain", "aliases": ["analgesia", "pain relief"], "therapeutic_areas": ["pain"]},
    {"name": "Inflammation", "aliases": ["inflammatory response"], "therapeutic_areas": ["inflammation"]},
    {"name": "Fever", "aliases": ["pyrexia"], "therapeutic_areas": ["pain"]},
    {
        "name": "Type 2 Diabetes",
        "aliases": [
            "type 2 diabetes mellitus",
            "Diabetes Mellitus, Type 2",
            "T2DM",
            "T2D",
            "non-insulin-dependent diabetes mellitus",
        ],
        "therapeutic_areas": ["endocrinology", "metabolic"],
    },
    {
        "name": "Obesity",
        "aliases": ["chronic weight management", "Obesity, Morbid"],
        "therapeutic_areas": ["metabolic", "obesity"],
    },
    {
        "name": "Hypertension",
        "aliases": ["high blood pressure", "HTN"],
        "therapeutic_areas": ["cardiovascular"],
    },
    {
        "name": "Hypercholesterolemia",
        "aliases": ["high cholesterol", "elevated LDL cholesterol"],
        "therapeutic_areas": ["cardiovascular"],
    },
    {
        "name": "Heart Failure",
        "aliases": ["congestive heart failure", "CHF", "cardiac failure"],
        "therapeutic_areas": ["cardiovascular"],
    },
    {
        "name": "Non-Small Cell Lung Cancer",
        "aliases": ["NSCLC", "Carcinoma, Non-Small-Cell Lung", "non-small-cell lung carcinoma"],
        "therapeutic_areas": ["oncology"],
    },
    {
        "name": "Melanoma",
        "aliases": ["malignant melanoma", "cutaneous melanoma"],
        "therapeutic_areas": ["oncology"],
    },
    {
        "name": "Rheumatoid Arthritis",
        "aliases": ["RA", "Arthritis, Rheumatoid"],
        "therapeutic_areas": ["immunology", "rheumatology"],
    },
    {
        "name": "Psoriatic Arthritis",
        "aliases": ["PsA", "Arthritis, Psoriatic"],
        "therapeutic_areas": ["immunology", "rheumatology"],
    },
    {
        "name": "Neovascular Age-Related Macular Degeneration",
        "aliases": ["wet AMD", "nAMD", "wet age-related macular degeneration", "Wet Macular Degeneration"],
        "therapeutic_areas": ["ophthalmology"],
    },
    {
        "name": "Diabetic Macular Edema",
        "aliases": ["DME", "diabetic macular oedema"],
        "therapeutic_areas": ["ophthalmology"],
    },
]

# (source, target, type, strength, rationale)
SEED_RELATIONSHIPS: list[tuple[str, str, RelationshipType, float, str]] = [
    # Aspirin's outgoing edges are deliberately limited to Ibuprofen
    ("Aspirin", "Ibuprofen", RelationshipType.SIMILAR_TO, 0.8, "both are NSAIDs with similar mechanisms"),
    ("Aspirin", "Ibuprofen", RelationshipType.ALTERNATIVE_TO, 0.7, "can be used as alternatives for pain relief"),
    ("Ibuprofen", "Pain", RelationshipType.TREATS, 0.9, "approved analgesic"),
    ("Ibuprofen", "Inflammation", RelationshipType.TREATS, 0.8, "approved anti-inflammatory"),
    ("Ibuprofen", "Fever", RelationshipType.TREATS, 0.7, "approved antipyretic"),
    ("Ibuprofen", "Naproxen", RelationshipType.SIMILAR_TO, 0.85, "propionic acid NSAIDs"),
    ("Ibuprofen", "Acetaminophen", RelationshipType.ALTERNATIVE_TO, 0.6, "OTC analgesic alternatives"),
    ("Naproxen", "Pain", RelationshipType.TREATS, 0.85, "approved analgesic"),
    ("Naproxen", "Inflammation", RelationshipType.TREATS, 0.8, "approved anti-inflammatory"),
    ("Acetaminophen", "Pain", RelationshipType.TREATS, 0.8, "approved analgesic"),
    ("Acetaminophen", "Fever", RelationshipType.TREATS, 0.85, "approved antipyretic"),
    ("Inflammation", "Pain", RelationshipType.CAUSES, 0.6, "inflammatory pain"),
    # Diabetes / metabolic
    ("Metformin", "Type 2 Diabetes", RelationshipType.TREATS, 0.9, "first-line therapy"),
    ("Metformin", "Sitagliptin", RelationshipType.COMBINED_WITH, 0.8, "fixed-dose combination (Janumet)"),
    ("Metformin", "Empagliflozin", RelationshipType.COMBINED_WITH, 0.75, "fixed-dose combination (Synjardy)"),
    ("Semaglutide", "Type 2 Diabetes", RelationshipType.TREATS, 0.95, "approved for glycaemic control"),
    ("Semaglutide", "Obesity", RelationshipType.TREATS, 0.9, "approved for chronic weight management"),
    ("Semaglutide", "Liraglutide", RelationshipType.SIMILAR_TO, 0.9, "GLP-1 analogues"),
    ("Semaglutide", "Tirzepatide", RelationshipType.COMPETES_WITH, 0.9, "incretin market leaders"),
    ("Tirzepatide", "Type 2 Diabetes", RelationshipType.TREATS, 0.95, "approved for glycaemic control"),
    ("Tirzepatide", "Obesity", RelationshipType.TREATS, 0.9, "approved for chronic weight management"),
    ("Tirzepatide", "Semaglutide", RelationshipType.SIMILAR_TO, 0.75, "incretin receptor agonists"),
    ("Liraglutide", "Type 2 Diabetes", RelationshipType.TREATS, 0.85, "approved for glycaemic control"),
    ("Liraglutide", "Obesity", RelationshipType.TREATS, 0.8, "approved for chronic weight management"),
    ("Dulaglutide", "Type 2 Diabetes", RelationshipType.TREATS, 0.85, "approved for glycaemic control"),
    ("Dulaglutide", "Semaglutide", RelationshipType.SIMILAR_TO, 0.85, "once-weekly GLP-1 agonists"),
    ("Empagliflozin", "Type 2 Diabetes", RelationshipType.TREATS, 0.85, "approved for glycaemic control"),
    ("Empagliflozin", "Heart Failure", RelationshipType.TREATS, 0.8, "approved to reduce HF hospitalisation"),
    ("Sitagliptin", "Type 2 Diabetes", RelationshipType.TREATS, 0.75, "approved for glycaemic control"),
    ("Obesity", "Type 2 Diabetes", RelationshipType.CAUSES, 0.6, "major risk factor"),
    ("Type 2 Diabetes", "Diabetic Macular Edema", RelationshipType.CAUSES, 0.5, "microvascular complication"),
    # Cardiovascular
    ("Atorvastatin", "Hypercholesterolemia", RelationshipType.TREATS, 0.9, "LDL lowering"),
    ("Rosuvastatin", "Hypercholesterolemia", RelationshipType.TREATS, 0.9, "LDL lowering"),
    ("Atorvastatin", "Rosuvastatin", RelationshipType.SIMILAR_TO, 0.9, "statins"),
    ("Lisinopril", "Hypertension", RelationshipType.TREATS, 0.9, "first-line antihypertensive"),
    ("Lisinopril", "Heart Failure", RelationshipType.TREATS, 0.7, "approved adjunct therapy"),
    ("Hypertension", "Heart Failure", RelationshipType.CAUSES, 0.6, "chronic pressure overload"),
    # Oncology
    ("Pembrolizumab", "Non-Small Cell Lung Cancer", RelationshipType.TREATS, 0.95, "first-line approval"),
    ("Pembrolizumab", "Melanoma", RelationshipType.TREATS, 0.9, "approved"),
    ("Nivolumab", "Non-Small Cell Lung Cancer", RelationshipType.TREATS, 0.9, "approved"),
    ("Nivolumab", "Melanoma", RelationshipType.TREATS, 0.9, "approved"),
    ("Atezolizumab", "Non-Small Cell Lung Cancer", RelationshipType.TREATS, 0.85, "approved"),
    ("Pembrolizumab", "Nivolumab", RelationshipType.SIMILAR_TO, 0.9, "anti-PD-1 antibodies"),
    ("Pembrolizumab", "Nivolumab", RelationshipType.COMPETES_WITH, 0.9, "checkpoint inhibitor market"),
    ("Nivolumab", "Atezolizumab", RelationshipType.COMPETES_WITH, 0.7, "checkpoint inhibitor market"),
    # Immunology
    ("Adalimumab", "Rheumatoid Arthritis", RelationshipType.TREATS, 0.9, "approved"),
    ("Adalimumab", "Psoriatic Arthritis", RelationshipType.TREATS, 0.85, "approved"),
    ("Etanercept", "Rheumatoid Arthritis", RelationshipType.TREATS, 0.85, "approved"),
    ("Etanercept", "Psoriatic Arthritis", RelationshipType.TREATS, 0.8, "approved"),
    ("Upadacitinib", "Rheumatoid Arthritis", RelationshipType.TREATS, 0.85, "approved"),
    ("Upadacitinib", "Psoriatic Arthritis", RelationshipType.TREATS, 0.8, "approved"),
    ("Adalimumab", "Etanercept", RelationshipType.SIMILAR_TO, 0.8, "TNF blockers"),
    ("Upadacitinib", "Adalimumab", RelationshipType.ALTERNATIVE_TO, 0.7, "oral option after TNF failure"),
    ("Rheumatoid Arthritis", "Psoriatic Arthritis", RelationshipType.SIMILAR_TO, 0.7, "inflammatory arthritides"),
    # Ophthalmology
    ("Aflibercept", "Neovascular Age-Related Macular Degeneration", RelationshipType.TREATS, 0.9, "approved"),
    ("Aflibercept", "Diabetic Macular Edema", RelationshipType.TREATS, 0.85, "approved"),
    ("Ranibizumab", "Neovascular Age-Related Macular Degeneration", RelationshipType.TREATS, 0.85, "approved"),
    ("Ranibizumab", "Diabetic Macular Edema", RelationshipType.TREATS, 0.8, "approved"),
    ("Faricimab", "Neovascular Age-Related Macular Degeneration", RelationshipType.TREATS, 0.9, "approved"),
    ("Faricimab", "Diabetic Macular Edema", RelationshipType.TREATS, 0.85, "approved"),
    ("Aflibercept", "Ranibizumab", RelationshipType.SIMILAR_TO, 0.75, "anti-VEGF agents"),
    ("Faricimab", "Aflibercept", RelationshipType.COMPETES_WITH, 0.85, "anti-VEGF market"),
]

# drug -> indication -> competitor tiers
SEED_COMPETITIVE_MAPPINGS: list[dict] = [
    {
        "drug": "Semaglutide",
        "indication": "Type 2 Diabetes",
        "direct": ["Tirzepatide", "Dulaglutide", "Liraglutide"],
        "mechanism": ["Liraglutide", "Dulaglutide"],
        "therapeutic_area": ["Empagliflozin", "Sitagliptin", "Metformin"],
    },
    {
        "drug": "Semaglutide",
        "indication": "Obesity",
        "direct": ["Tirzepatide"],
        "mechanism": ["Liraglutide"],
    },
    {
        "drug": "Pembrolizumab",
        "indication": "Non-Small Cell Lung Cancer",
        "direct": ["Nivolumab", "Atezolizumab"],
        "mechanism": ["Nivolumab"],
    },
    {
        "drug": "Adalimumab",
        "indication": "Rheumatoid Arthritis",
        "direct": ["Etanercept"],
        "mechanism": ["Etanercept"],
        "therapeutic_area": ["Upadacitinib"],
    },
    {
        "drug": "Aflibercept",
        "indication": "Neovascular Age-Related Macular Degeneration",
        "direct": ["Faricimab", "Ranibizumab"],
    },
]


def load_seed(graph: KnowledgeGraph) -> KnowledgeGraph:
    """
    Load the curated seed into a graph.

    Raises:
        ValidationError, NotFoundError: Seed data is inconsistent
    """
    for drug in SEED_DRUGS:
        graph.add_node(EntitySpec(kind=EntityKind.DRUG, **drug), sources=[SEED_SOURCE], confidence=0.9)
    for indication in SEED_INDICATIONS:
        graph.add_node(
            EntitySpec(kind=EntityKind.INDICATION, **indication), sources=[SEED_SOURCE], confidence=0.9
        )
    for source, target, rel_type, strength, rationale in SEED_RELATIONSHIPS:
        graph.add_edge(
            source, target, rel_type, strength,
            properties={"rationale": rationale},
            sources=[SEED_SOURCE],
            confidence=0.9,
        )
    for mapping in SEED_COMPETITIVE_MAPPINGS:
        graph.set_competitive_mapping(**mapping)

    logger.info(
        "Initialized seed knowledge graph: %d nodes, %d edges",
        graph.node_count,
        graph.edge_count,
    )
    return graph


def build_seed_graph(settings: Settings | None = None) -> KnowledgeGraph:
    """Create a new graph populated with the curated seed."""
    return load_seed(KnowledgeGraph(settings))
