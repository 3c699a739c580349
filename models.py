from typing import Optional, Dict, Any, Literal
from pydantic import BaseModel, Field

class SaveQuestionnaireRequest(BaseModel):
    questionnaireData: Dict[str, Any]
    completionStatus: Literal["in_progress", "completed", "submitted"] = "in_progress"
    # If provided and != caller uid, caller must be admin
    clientId: Optional[str] = None

class QuickPlanRequest(BaseModel):
    age: int = Field(default=0, ge=0)
    annualHouseholdIncome: float = Field(default=0, ge=0)
    primaryFinancialGoal: str = ""
    monthlyExpenses: float = Field(default=0, ge=0)
    currentSavings: float = Field(default=0, ge=0)
    retirementBalance: float = Field(default=0, ge=0)
    totalDebt: float = Field(default=0, ge=0)
    monthlyDebtPayments: float = Field(default=0, ge=0)
    monthlyHousingCost: float = Field(default=0, ge=0)
    employmentStatus: str = ""
    jobSecurity: str = ""
    emergencyFundCoverage: str = ""
    riskTolerance: str = ""
    retirementTimeline: str = ""
    urgentFinancialConcern: str = ""
    expectedLifeChanges: str = ""
    additionalContext: Optional[str] = None
    clientId: Optional[str] = None

class AnalysisRequest(BaseModel):
    # If provided and != caller uid, caller must be admin
    clientId: Optional[str] = None
    # Optional override for dev/testing (POST a raw questionnaire instead of the stored one)
    questionnaireData: Optional[Dict[str, Any]] = None
