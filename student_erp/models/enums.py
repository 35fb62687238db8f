import enum


class UserRole(str, enum.Enum):
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class Program(str, enum.Enum):
    BS = "BS"
    BBA = "BBA"


class VisibilityType(str, enum.Enum):
    ALL = "ALL"
    PROGRAM = "PROGRAM"
    BATCH = "BATCH"


class AssignmentType(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    BATCH = "BATCH"
    PROGRAM = "PROGRAM"


class TaskStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class EmailStatus(str, enum.Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class DocumentType(str, enum.Enum):
    # General
    PASSPORT = "PASSPORT"
    OLD_PASSPORT = "OLD_PASSPORT"
    IELTS = "IELTS"
    VISA = "VISA"
    I20 = "I20"
    TRANSCRIPT = "TRANSCRIPT"
    AADHAR_CARD = "AADHAR_CARD"
    DRIVERS_LICENSE = "DRIVERS_LICENSE"
    AFFIDAVIT = "AFFIDAVIT"
    CV_RESUME = "CV_RESUME"
    SOP = "SOP"
    OTHER = "OTHER"
    # Education
    MARKSHEET_10TH = "MARKSHEET_10TH"
    MARKSHEET_12TH = "MARKSHEET_12TH"
    GRE_SCORECARD = "GRE_SCORECARD"
    TOEFL_SCORECARD = "TOEFL_SCORECARD"
    LANGUAGE_TEST_SCORECARD = "LANGUAGE_TEST_SCORECARD"
    # Financial - personal
    PERSONAL_PAN_CARD = "PERSONAL_PAN_CARD"
    PERSONAL_ITR = "PERSONAL_ITR"
    PERSONAL_SALARY_SLIPS = "PERSONAL_SALARY_SLIPS"
    PERSONAL_SALARY_ACCOUNT_STATEMENT = "PERSONAL_SALARY_ACCOUNT_STATEMENT"
    PERSONAL_SAVING_ACCOUNT_STATEMENT = "PERSONAL_SAVING_ACCOUNT_STATEMENT"
    PERSONAL_FD_RECEIPTS = "PERSONAL_FD_RECEIPTS"
    PERSONAL_BALANCE_CERT_SAVINGS = "PERSONAL_BALANCE_CERT_SAVINGS"
    PERSONAL_BALANCE_CERT_BUSINESS = "PERSONAL_BALANCE_CERT_BUSINESS"
    PERSONAL_BALANCE_CERT_FD = "PERSONAL_BALANCE_CERT_FD"
    PERSONAL_LOAN_SANCTION_LETTER = "PERSONAL_LOAN_SANCTION_LETTER"
    PERSONAL_LOAN_DISBURSEMENT_LETTER = "PERSONAL_LOAN_DISBURSEMENT_LETTER"
    PERSONAL_LOAN_AGREEMENT = "PERSONAL_LOAN_AGREEMENT"
    # Financial - mother
    MOTHER_PAN_CARD = "MOTHER_PAN_CARD"
    MOTHER_ITR = "MOTHER_ITR"
    MOTHER_ITR_COMPUTATION = "MOTHER_ITR_COMPUTATION"
    MOTHER_SALARY_ACCOUNT_STATEMENT = "MOTHER_SALARY_ACCOUNT_STATEMENT"
    MOTHER_SALARY_SLIPS = "MOTHER_SALARY_SLIPS"
    MOTHER_SAVING_ACCOUNT_STATEMENT = "MOTHER_SAVING_ACCOUNT_STATEMENT"
    MOTHER_FD_RECEIPTS = "MOTHER_FD_RECEIPTS"
    MOTHER_BALANCE_CERT_SAVINGS = "MOTHER_BALANCE_CERT_SAVINGS"
    MOTHER_BALANCE_CERT_BUSINESS = "MOTHER_BALANCE_CERT_BUSINESS"
    MOTHER_BALANCE_CERT_FD = "MOTHER_BALANCE_CERT_FD"
    MOTHER_GST_CERTIFICATE = "MOTHER_GST_CERTIFICATE"
    MOTHER_BUSINESS_REGISTRATION = "MOTHER_BUSINESS_REGISTRATION"
    # Financial - father
    FATHER_PAN_CARD = "FATHER_PAN_CARD"
    FATHER_ITR = "FATHER_ITR"
    FATHER_ITR_COMPUTATION = "FATHER_ITR_COMPUTATION"
    FATHER_SALARY_ACCOUNT_STATEMENT = "FATHER_SALARY_ACCOUNT_STATEMENT"
    FATHER_SALARY_SLIPS = "FATHER_SALARY_SLIPS"
    FATHER_SAVING_ACCOUNT_STATEMENT = "FATHER_SAVING_ACCOUNT_STATEMENT"
    FATHER_FD_RECEIPTS = "FATHER_FD_RECEIPTS"
    FATHER_BALANCE_CERT_SAVINGS = "FATHER_BALANCE_CERT_SAVINGS"
    FATHER_BALANCE_CERT_BUSINESS = "FATHER_BALANCE_CERT_BUSINESS"
    FATHER_BALANCE_CERT_FD = "FATHER_BALANCE_CERT_FD"
    FATHER_GST_CERTIFICATE = "FATHER_GST_CERTIFICATE"
    FATHER_BUSINESS_REGISTRATION = "FATHER_BUSINESS_REGISTRATION"
    # Financial - other sources (indexed by other_source_index)
    OTHER_SOURCE_PAN_CARD = "OTHER_SOURCE_PAN_CARD"
    OTHER_SOURCE_ITR = "OTHER_SOURCE_ITR"
    OTHER_SOURCE_ITR_COMPUTATION = "OTHER_SOURCE_ITR_COMPUTATION"
    OTHER_SOURCE_SALARY_ACCOUNT_STATEMENT = "OTHER_SOURCE_SALARY_ACCOUNT_STATEMENT"
    OTHER_SOURCE_SALARY_SLIPS = "OTHER_SOURCE_SALARY_SLIPS"
    OTHER_SOURCE_SAVING_ACCOUNT_STATEMENT = "OTHER_SOURCE_SAVING_ACCOUNT_STATEMENT"
    OTHER_SOURCE_FD_RECEIPTS = "OTHER_SOURCE_FD_RECEIPTS"
    OTHER_SOURCE_BALANCE_CERT_SAVINGS = "OTHER_SOURCE_BALANCE_CERT_SAVINGS"
    OTHER_SOURCE_BALANCE_CERT_BUSINESS = "OTHER_SOURCE_BALANCE_CERT_BUSINESS"
    OTHER_SOURCE_BALANCE_CERT_FD = "OTHER_SOURCE_BALANCE_CERT_FD"
    OTHER_SOURCE_GST_CERTIFICATE = "OTHER_SOURCE_GST_CERTIFICATE"
    OTHER_SOURCE_BUSINESS_REGISTRATION = "OTHER_SOURCE_BUSINESS_REGISTRATION"
