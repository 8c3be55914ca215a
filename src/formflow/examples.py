"""
Example flow builder: a field-service work-order inspection.

Pages:
    0 Job Details         siteAccess == No -> "Access Problem", else "Inspection"
    1 Access Problem      rescheduled == Yes -> end, else skip to Sign-off
    2 Inspection          issuesFound includes Electrical -> "Electrical Details", else skip
    3 Electrical Details  continue
    4 Sign-off            continue (complete)

Exercises every field kind, template defaults, a dependent field and all
navigation sentinels.
"""
from formflow.model import (
    END,
    SKIP,
    CheckboxField,
    Condition,
    FileField,
    Flow,
    NavigationRule,
    RadioField,
    ReadonlyField,
    SelectField,
    Step,
    TextareaField,
    TextField,
    TitleField,
)


def build_example_flow() -> Flow:
    job_details = Step(
        id="step1",
        name="Job Details",
        description="Confirm the work order and site access",
        action_name="submitJobDetails",
        fields=[
            TitleField(id="jobHeading", title="Work Order"),
            ReadonlyField(id="scopeOfWork", title="Scope of Work", default_value="#workorder.scopeOfWork"),
            TextField(
                id="technicianName",
                title="Technician",
                required=True,
                default_value="#technician.name",
            ),
            RadioField(id="siteAccess", title="Site accessible?", required=True, options=["Yes", "No"]),
            TextareaField(
                id="accessNotes",
                title="Why not?",
                required=True,
                placeholder="Describe the problem",
                depends_on="siteAccess",
                show_when="No",
            ),
        ],
        navigation_rule=NavigationRule(
            field_id="siteAccess",
            conditions=[Condition(value="No", next_step_name="Access Problem")],
            default_step_name="Inspection",
        ),
    )

    access_problem = Step(
        id="step2",
        name="Access Problem",
        description="Record the failed visit",
        action_name="submitAccessProblem",
        fields=[
            RadioField(id="rescheduled", title="Visit rescheduled?", required=True, options=["Yes", "No"]),
            TextField(id="newDate", title="New date", depends_on="rescheduled", show_when="Yes"),
        ],
        navigation_rule=NavigationRule(
            field_id="rescheduled",
            conditions=[Condition(value="Yes", next_step_name=END)],
            default_step_name=SKIP,
        ),
    )

    inspection = Step(
        id="step3",
        name="Inspection",
        description="What did you find?",
        action_name="submitInspection",
        fields=[
            CheckboxField(
                id="issuesFound",
                title="Issues found",
                required=True,
                options=["Electrical", "Plumbing", "Structural"],
            ),
            FileField(
                id="sitePhotos",
                title="Site photos",
                accepted_file_types=["image/*"],
                max_file_size=25,
                multiple=True,
                capture_mode="environment",
            ),
        ],
        navigation_rule=NavigationRule(
            field_id="issuesFound",
            conditions=[Condition(value="Electrical", next_step_name="Electrical Details")],
            default_step_name=SKIP,
        ),
    )

    electrical = Step(
        id="step4",
        name="Electrical Details",
        description="Panel condition",
        action_name="submitElectrical",
        fields=[
            SelectField(
                id="panelCondition",
                title="Panel condition",
                required=True,
                options=["Good", "Worn", "Damaged"],
            ),
            TextareaField(id="electricalNotes", title="Notes"),
        ],
    )

    sign_off = Step(
        id="step5",
        name="Sign-off",
        description="Client confirmation",
        action_name="submitSignOff",
        fields=[
            TextField(id="clientName", title="Client name", required=True, default_value="#client.name"),
            RadioField(id="followUpNeeded", title="Follow-up needed?", options=["Yes", "No"]),
        ],
    )

    return Flow(
        name="Work Order Inspection",
        description="Site inspection for field technicians",
        steps=[job_details, access_problem, inspection, electrical, sign_off],
    )
