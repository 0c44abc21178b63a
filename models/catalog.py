"""
Remote catalog payload schemas.

Field names are snake_case; aliases carry the catalog's wire names.
Optional fields default to None because the catalog omits them freely.
"""

from typing import Optional
from pydantic import Field

from models.base import CatalogPayload


class RemoteProduct(CatalogPayload):
    """Product as returned by productgetbyrefid."""

    id: int = Field(..., alias="Id")
    name: Optional[str] = Field(None, alias="Name")
    department_id: Optional[int] = Field(None, alias="DepartmentId")
    category_id: Optional[int] = Field(None, alias="CategoryId")
    brand_id: Optional[int] = Field(None, alias="BrandId")
    link_id: Optional[str] = Field(None, alias="LinkId")
    ref_id: Optional[str] = Field(None, alias="RefId")
    is_visible: Optional[bool] = Field(None, alias="IsVisible")
    description: Optional[str] = Field(None, alias="Description")
    description_short: Optional[str] = Field(None, alias="DescriptionShort")
    release_date: Optional[str] = Field(None, alias="ReleaseDate")
    keywords: Optional[str] = Field(None, alias="KeyWords")
    title: Optional[str] = Field(None, alias="Title")
    is_active: Optional[bool] = Field(None, alias="IsActive")
    tax_code: Optional[str] = Field(None, alias="TaxCode")
    meta_tag_description: Optional[str] = Field(None, alias="MetaTagDescription")
    supplier_id: Optional[int] = Field(None, alias="SupplierId")
    show_without_stock: Optional[bool] = Field(None, alias="ShowWithoutStock")
    adwords_remarketing_code: Optional[str] = Field(None, alias="AdWordsRemarketingCode")
    lomadee_campaign_code: Optional[str] = Field(None, alias="LomadeeCampaignCode")
    score: Optional[int] = Field(None, alias="Score")


class RemoteBrand(CatalogPayload):
    """Brand as returned by /brand/{id} (camelCase on the wire)."""

    id: int = Field(..., alias="id")
    name: Optional[str] = Field(None, alias="name")
    is_active: Optional[bool] = Field(None, alias="isActive")
    title: Optional[str] = Field(None, alias="title")
    meta_tag_description: Optional[str] = Field(None, alias="metaTagDescription")
    image_url: Optional[str] = Field(None, alias="imageUrl")


class RemoteCategory(CatalogPayload):
    """Category as returned by /category/{id}."""

    id: int = Field(..., alias="Id")
    name: Optional[str] = Field(None, alias="Name")
    father_category_id: Optional[int] = Field(None, alias="FatherCategoryId")
    title: Optional[str] = Field(None, alias="Title")
    description: Optional[str] = Field(None, alias="Description")
    keywords: Optional[str] = Field(None, alias="Keywords")
    is_active: Optional[bool] = Field(None, alias="IsActive")
    show_in_store_front: Optional[bool] = Field(None, alias="ShowInStoreFront")
    show_brand_filter: Optional[bool] = Field(None, alias="ShowBrandFilter")
    active_store_front_link: Optional[bool] = Field(None, alias="ActiveStoreFrontLink")
    global_category_id: Optional[int] = Field(None, alias="GlobalCategoryId")
    score: Optional[int] = Field(None, alias="Score")
    link_id: Optional[str] = Field(None, alias="LinkId")
    has_children: Optional[bool] = Field(None, alias="HasChildren")


class RemoteSku(CatalogPayload):
    """SKU as returned by stockkeepingunitByProductId."""

    id: int = Field(..., alias="Id")
    product_id: int = Field(..., alias="ProductId")
    name: Optional[str] = Field(None, alias="Name")
    is_active: Optional[bool] = Field(None, alias="IsActive")
    ref_id: Optional[str] = Field(None, alias="RefId")
    is_kit: Optional[bool] = Field(None, alias="IsKit")
    height: Optional[float] = Field(None, alias="Height")
    width: Optional[float] = Field(None, alias="Width")
    length: Optional[float] = Field(None, alias="Length")
    weight_kg: Optional[float] = Field(None, alias="WeightKg")
    commercial_condition_id: Optional[int] = Field(None, alias="CommercialConditionId")
    reward_value: Optional[float] = Field(None, alias="RewardValue")
    estimated_date_arrival: Optional[str] = Field(None, alias="EstimatedDateArrival")
    measurement_unit: Optional[str] = Field(None, alias="MeasurementUnit")
    unit_multiplier: Optional[float] = Field(None, alias="UnitMultiplier")
    manufacturer_code: Optional[str] = Field(None, alias="ManufacturerCode")
    position: Optional[int] = Field(None, alias="Position")


class RemoteImage(CatalogPayload):
    """SKU file entry as returned by /stockkeepingunit/{skuId}/file."""

    id: int = Field(..., alias="Id")
    sku_id: int = Field(..., alias="SkuId")
    archive_id: Optional[int] = Field(None, alias="ArchiveId")
    name: Optional[str] = Field(None, alias="Name")
    is_main: Optional[bool] = Field(None, alias="IsMain")
    label: Optional[str] = Field(None, alias="Label")
    text: Optional[str] = Field(None, alias="Text")
    url: Optional[str] = Field(None, alias="Url")
    file_location: Optional[str] = Field(None, alias="FileLocation")
    position: Optional[int] = Field(None, alias="Position")


class RemoteStockBalance(CatalogPayload):
    """One warehouse row of a SKU's inventory."""

    warehouse_id: str = Field(..., alias="warehouseId")
    warehouse_name: Optional[str] = Field(None, alias="warehouseName")
    total_quantity: int = Field(0, alias="totalQuantity")
    reserved_quantity: int = Field(0, alias="reservedQuantity")
    has_unlimited_quantity: bool = Field(False, alias="hasUnlimitedQuantity")
    lead_time: Optional[str] = Field(None, alias="leadTime")


class RemoteStock(CatalogPayload):
    """Inventory as returned by /inventory/skus/{skuId}."""

    sku_id: Optional[str] = Field(None, alias="skuId")
    balance: list[RemoteStockBalance] = Field(default_factory=list, alias="balance")


class RemoteAttribute(CatalogPayload):
    """Product specification as returned by /products/{id}/specification."""

    id: int = Field(..., alias="Id")
    name: str = Field(..., alias="Name")
    value: list[str] = Field(default_factory=list, alias="Value")
