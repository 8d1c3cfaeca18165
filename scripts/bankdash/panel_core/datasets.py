"""Built-in module datasets shown when no backend is connected."""

from __future__ import annotations

COMPLIANCE_MODULES: list[dict[str, str]] = [
    {"title": "Incomplete Contact Attempts", "count": "156", "status": "pending", "statusText": "Action Needed"},
    {"title": "Flag Candidates (Not Yet Flagged)", "count": "67", "status": "flagged", "statusText": "Critical"},
    {"title": "Internal Ledger Candidates (Art. 3.5)", "count": "234", "status": "complete", "statusText": "Reviewed"},
    {"title": "Statement Freeze Needed (Art. 7.3)", "count": "89", "status": "pending", "statusText": "Processing"},
    {"title": "CBUAE Transfer Candidates (Art. 8)", "count": "123", "status": "flagged", "statusText": "Urgent"},
    {"title": "Foreign Currency Conversion", "count": "45", "status": "complete", "statusText": "Complete"},
    {"title": "SDB Court Application Needed", "count": "12", "status": "pending", "statusText": "In Review"},
    {"title": "Unclaimed Instruments - Internal", "count": "78", "status": "flagged", "statusText": "Action Required"},
    {"title": "Claims Processing Pending", "count": "134", "status": "complete", "statusText": "On Track"},
    {"title": "Annual CBUAE Report Summary", "count": "1", "status": "pending", "statusText": "Due Soon"},
    {"title": "Record Retention Compliance", "count": "98%", "status": "complete", "statusText": "Compliant"},
]

DORMANT_MODULES: list[dict[str, str]] = [
    {"title": "Safe Deposit Dormancy", "count": "1,247", "status": "pending", "statusText": "Pending Review"},
    {"title": "Investment Account Inactivity", "count": "892", "status": "flagged", "statusText": "Action Required"},
    {"title": "Fixed Deposit Inactivity", "count": "543", "status": "complete", "statusText": "Up to Date"},
    {"title": "Demand Deposit Inactivity", "count": "2,156", "status": "pending", "statusText": "Processing"},
    {"title": "Unclaimed Payment Instruments", "count": "789", "status": "flagged", "statusText": "Critical"},
    {"title": "Eligible for CBUAE Transfer", "count": "234", "status": "complete", "statusText": "Ready"},
    {"title": "Article 3 Process Needed", "count": "167", "status": "pending", "statusText": "In Progress"},
    {"title": "Contact Attempts Needed", "count": "445", "status": "flagged", "statusText": "Urgent"},
    {"title": "High Value Dormant (≥25K AED)", "count": "89", "status": "flagged", "statusText": "Priority"},
    {"title": "Dormant to Active Transitions", "count": "312", "status": "complete", "statusText": "Monitored"},
]

FALLBACK_MODULES: dict[str, list[dict[str, str]]] = {
    "compliance": COMPLIANCE_MODULES,
    "dormant": DORMANT_MODULES,
}
