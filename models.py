from typing import Union

from pydantic import BaseModel, ConfigDict, Field


# Models
class PaymentRequest(BaseModel):
    phone: str
    amount: Union[int, str]


class StkPushRequest(BaseModel):
    """Lipa Na M-Pesa Online request body, serialized with the Daraja field names."""

    model_config = ConfigDict(populate_by_name=True)

    business_short_code: str = Field(alias="BusinessShortCode")
    password: str = Field(alias="Password")
    timestamp: str = Field(alias="Timestamp", pattern=r"^\d{14}$")
    transaction_type: str = Field(default="CustomerPayBillOnline", alias="TransactionType")
    amount: Union[int, str] = Field(alias="Amount")
    party_a: str = Field(alias="PartyA")
    party_b: str = Field(alias="PartyB")
    phone_number: str = Field(alias="PhoneNumber")
    callback_url: str = Field(alias="CallBackURL")
    account_reference: str = Field(alias="AccountReference")
    transaction_desc: str = Field(alias="TransactionDesc")


class CallbackAck(BaseModel):
    ResultCode: int = 0
    ResultDesc: str = "Success"
