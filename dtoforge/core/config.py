from pydantic_settings import BaseSettings, SettingsConfigDict

from dtoforge.dto_gen.types import GeneratorConfig, NamingStyle, OutputLayout


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="DTOFORGE_", extra="ignore")

    app_name: str = "dtoforge"
    log_level: str = "INFO"

    output_dir: str = "generated/dto"
    output_layout: OutputLayout = OutputLayout.FLAT
    file_naming_style: NamingStyle = NamingStyle.SNAKE

    connect_prefix: str = "Connect"
    create_prefix: str = "Create"
    update_prefix: str = "Update"
    dto_suffix: str = "Dto"
    entity_prefix: str = ""
    entity_suffix: str = ""

    export_relation_modifier_classes: bool = True
    re_export: bool = False

    def to_generator_config(self) -> GeneratorConfig:
        """Freeze the generation-related settings for one run."""
        return GeneratorConfig(
            output_layout=self.output_layout,
            file_naming_style=self.file_naming_style,
            connect_prefix=self.connect_prefix,
            create_prefix=self.create_prefix,
            update_prefix=self.update_prefix,
            dto_suffix=self.dto_suffix,
            entity_prefix=self.entity_prefix,
            entity_suffix=self.entity_suffix,
            export_relation_modifier_classes=self.export_relation_modifier_classes,
            re_export=self.re_export,
        )
