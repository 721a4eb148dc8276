from verbground.dataframe import (
  Dataframe,
  case_when,
  col,
  desc,
  everything,
  if_else,
  is_na,
  starts_with,
)
from verbground.datasets import load_measurements

df = Dataframe(load_measurements())

print("--- arrange")
print(df.arrange("sample", desc("intensity")))

print("--- filter")
print(df.filter(col("concentration") >= 1, "!is.na(intensity)"))

print("--- distinct")
print(df.distinct("sample", "concentration"))

print("--- sample_n")
print(df.sample_n(4, seed=42))

print("--- select")
print(df.select("intensity", everything()).select(-starts_with("rep")))

print("--- rename")
print(df.rename(conc="concentration").head(3))

print("--- mutate")
print(df.mutate(ratio=col("intensity") / col("concentration"), high="ratio > 20"))

print("--- transmute")
print(df.transmute("sample", "replicate", log_intensity="log10(intensity)"))

print("--- conditional replacement")
print(
  df.mutate(
    intensity=if_else(col("intensity") < 15, None, col("intensity")),
    level=case_when(
      (is_na(col("intensity")), "failed"),
      (col("intensity") < 50, "low"),
      default="high",
    ),
  )
)
