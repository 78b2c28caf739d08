"""Built-in sample preparation used by the preview endpoints and the CLI."""

import copy

SAMPLE_PREPARATION = {
    "title": "Senior Product Manager at Acme Corp",
    "job_url": "https://careers.acme.example/jobs/senior-pm",
    "step_1_data": {
        "job_title": "Senior Product Manager",
        "company_name": "Acme Corp",
        "location": "London, UK",
        "work_type": "Hybrid",
        "salary_range": "£85,000 - £100,000",
        "company_summary": "Acme Corp builds workflow automation software for mid-sized logistics firms.",
        "company_description": (
            "Founded in 2012, Acme Corp sells a subscription platform that plans routes, "
            "tracks shipments and automates carrier invoicing."
        ),
        "job_description": "Own the roadmap for the carrier invoicing product and lead a squad of eight engineers.",
        "key_requirements": [
            "5+ years of B2B SaaS product management",
            "Experience with usage-based pricing",
            "Strong SQL and analytics skills",
        ],
        "key_responsibilities": [
            "Define and communicate the product vision",
            "Run discovery with enterprise customers",
            "Partner with sales on pricing and packaging",
        ],
    },
    "step_2_data": {
        "key_partners": ["Freight carriers", "ERP vendors"],
        "key_activities": ["Platform development", "Carrier integrations"],
        "key_resources": ["Carrier network data", "Engineering team"],
        "value_propositions": ["Cut invoicing errors by automating reconciliation"],
        "customer_relationships": ["Dedicated account managers"],
        "channels": ["Direct sales", "Partner marketplace"],
        "customer_segments": ["Mid-sized logistics companies"],
        "cost_structure": ["Cloud hosting", "Sales and marketing"],
        "revenue_streams": ["Annual subscriptions", "Per-shipment fees"],
        "topNewsItems": [
            {
                "title": "Acme Corp raises Series C to expand in Europe",
                "url": "https://news.example/acme-series-c",
                "source": "TechDaily",
                "date": "2024-03-14",
                "summary": "The round will fund new offices in Berlin and Madrid.",
            },
        ],
        "companyTimeline": ["2012 – Company founded", "2019 – Series B", "2024 – Series C"],
    },
    "step_3_data": {
        "strengths": ["Sticky customer base", "Deep carrier integrations"],
        "weaknesses": ["Limited brand awareness outside the UK"],
        "opportunities": ["EU expansion", "Embedded payments"],
        "threats": ["Large ERP vendors building similar features"],
    },
    "step_4_data": {
        "matchScore": 82,
        "items": [
            {
                "requirement": "5+ years of B2B SaaS product management",
                "evidence": "Six years leading B2B billing products at Parcelify.",
                "score": 90,
            },
            {
                "requirement": "Strong SQL and analytics skills",
                "evidence": "Built the team's Looker dashboards and weekly KPI review.",
                "score": 74,
            },
        ],
        "candidate": {
            "name": "Jordan Lee",
            "title": "Product Manager",
            "seniority": "Senior",
            "location": "London, UK",
            "skills": ["Roadmapping", "SQL", "Pricing strategy"],
        },
    },
    "step_5_data": {
        "why_company": ["Acme is the category leader in carrier invoicing."],
        "why_role": ["The role owns pricing, which is where I have done my best work."],
        "why_now": ["Acme's Series C opens the European market the role will lead."],
        "why_you": ["I have shipped usage-based pricing twice at comparable companies."],
    },
    "step_6_data": {
        "questions": [
            {
                "question": "Tell us about a pricing change you led.",
                "answer": "Moved Parcelify to per-shipment pricing, growing net revenue retention to 118%.",
                "tips": "Use numbers; name the trade-offs.",
                "category": "Behavioral",
            },
        ],
        "questions_to_ask": [
            "How does the team measure success in the first six months?",
            "Which customers drive the roadmap today?",
        ],
    },
}


def sample_preparation() -> dict:
    """A fresh copy of the sample, safe for callers to mutate."""
    return copy.deepcopy(SAMPLE_PREPARATION)
